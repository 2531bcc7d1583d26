#!/usr/bin/env python3
"""
Run a single reduce task from the command line.

Reads mrtmp.<job>-<m>-<reduce> for every map task m, reduces each key and
writes the sorted result (by default to mrtmp.<job>-res-<reduce>).

Usage:
    mrreduce-run wc 0 --n-map 3
    mrreduce-run wc 1 --n-map 3 --reduce-function concat --output out.json
    mrreduce-run wc 2 --n-map 3 --reduce-function mypkg.jobs:reduce_f --workers 4
"""

import argparse
import importlib
import json
import os
import sys

from mrreduce.framework.reducer import concat_reduce, word_count_reduce
from mrreduce.utils.config import resolve_intermediate_dir
from mrreduce.utils.naming import merge_name
from mrreduce.worker.executor import TaskExecutor

BUILTIN_REDUCE_FUNCTIONS = {
    'word_count': word_count_reduce,
    'concat': concat_reduce,
}


def load_reduce_function(name):
    """Resolve a bundled name or a 'module:function' reference."""
    if name in BUILTIN_REDUCE_FUNCTIONS:
        return BUILTIN_REDUCE_FUNCTIONS[name]

    module_name, sep, attr = name.partition(':')
    if not sep or not module_name or not attr:
        raise ValueError(
            f"Unknown reduce function '{name}'. Use one of "
            f"{sorted(BUILTIN_REDUCE_FUNCTIONS)} or 'module:function'.")

    # console scripts do not put the working directory on sys.path
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    module = importlib.import_module(module_name)
    func = getattr(module, attr, None)
    if not callable(func):
        raise ValueError(f"'{name}' is not a callable")
    return func


def build_parser():
    parser = argparse.ArgumentParser(description='Run one MapReduce reduce task')
    parser.add_argument('job_name', help='Name of the MapReduce job')
    parser.add_argument('reduce_task', type=int, help='Index of this reduce task')
    parser.add_argument('--n-map', type=int, required=True,
                        help='Number of map tasks that produced intermediate files')
    parser.add_argument('--output', default=None,
                        help='Output file (default: mrtmp.<job>-res-<reduce> in the intermediate dir)')
    parser.add_argument('--intermediate-dir', default=None,
                        help='Directory holding intermediate files')
    parser.add_argument('--reduce-function', default='word_count',
                        help="Bundled reduce function or 'module:function' "
                             "(modules are looked up from the working directory too)")
    parser.add_argument('--workers', type=int, default=None,
                        help='Threads used for reduction')
    parser.add_argument('--quiet', action='store_true', help='Only print failures')
    parser.add_argument('--json', action='store_true', help='Print the task result as JSON')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.n_map < 0:
        parser.error(f"--n-map must be >= 0, got {args.n_map}")

    try:
        reduce_function = load_reduce_function(args.reduce_function)
        executor = TaskExecutor(
            reduce_function=reduce_function,
            intermediate_dir=args.intermediate_dir,
            max_workers=args.workers,
            verbose=not args.quiet,
        )
    except (ValueError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    out_file = args.output or os.path.join(
        resolve_intermediate_dir(args.intermediate_dir),
        merge_name(args.job_name, args.reduce_task))

    result = executor.execute_reduce(args.job_name, args.reduce_task, out_file, args.n_map)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    return 0 if result.success else 1


if __name__ == '__main__':
    sys.exit(main())
