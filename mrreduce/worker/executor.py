from contextlib import ExitStack
from datetime import datetime

from mrreduce.framework.reducer import ReducePhase, word_count_reduce
from mrreduce.framework.shuffler import ShufflePhase
from mrreduce.utils.config import resolve_intermediate_dir, resolve_reduce_workers
from mrreduce.utils.errors import ReduceTaskError
from mrreduce.worker.intermediate import IntermediateFileManager
from mrreduce.worker.output import OutputWriter
from mrreduce.worker.state import ReduceTaskResult, TaskState


class TaskExecutor:
    """Executes reduce tasks.

    Based on Google MapReduce paper:
    - Read the intermediate file every map task wrote for this partition
    - Group values by key (all shards drained before reducing)
    - Sort keys, apply reduce function per key, write output in key order

    A failed task is reported through its result rather than by crashing
    the worker. Retrying is up to the caller.
    """

    def __init__(self, reduce_function=None, intermediate_dir=None,
                 max_workers=None, verbose=True):
        """Initialize executor with framework components.

        Args:
            reduce_function: User-defined reduce function (default: word_count_reduce)
            intermediate_dir: Directory holding intermediate shards
                              (default: $MAPREDUCE_INTERMEDIATE_DIR or '.')
            max_workers: Threads used for reduction
                         (default: $MAPREDUCE_REDUCE_WORKERS or 1)
            verbose: Print progress lines (failures are always printed)
        """
        self.reduce_function = reduce_function or word_count_reduce
        self.intermediate_dir = resolve_intermediate_dir(intermediate_dir)
        self.max_workers = resolve_reduce_workers(max_workers)
        self.verbose = verbose

        self.shuffle_phase = ShufflePhase()
        self.intermediate_manager = IntermediateFileManager(base_dir=self.intermediate_dir)

    def execute_reduce(self, job_name, reduce_task, out_file, n_map,
                       reduce_function=None, raise_on_error=False):
        """Execute a reduce task.

        1. Open the nMap intermediate shards for this partition
        2. Read every record and group values by key
        3. Sort the distinct keys
        4. Apply reduce function to each (key, [values]) group
        5. Write one record per key to out_file, replacing it atomically

        Args:
            job_name: Name of the whole MapReduce job
            reduce_task: Index of this reduce task (the partition)
            out_file: Where the output goes
            n_map: Number of map tasks that ran
            reduce_function: Overrides the executor's reduce function
            raise_on_error: Re-raise the ReduceTaskError after recording it

        Returns:
            ReduceTaskResult in state DONE or FATAL
        """
        if n_map < 0:
            raise ValueError(f"n_map must be >= 0, got {n_map}")

        reduce_phase = ReducePhase(reduce_function or self.reduce_function,
                                   max_workers=self.max_workers)
        result = ReduceTaskResult(job_name, reduce_task, out_file, n_map)
        self._log(f"Reduce task {reduce_task} of job {job_name}: "
                  f"opening {n_map} intermediate files")

        try:
            grouped_data = self._read_and_group(job_name, reduce_task, n_map, result)

            self._advance(result, TaskState.SORTING)
            sorted_keys = self.shuffle_phase.sort_keys(grouped_data)

            self._advance(result, TaskState.REDUCING_AND_WRITING)
            with OutputWriter(out_file) as writer:
                for key, reduced in reduce_phase.execute(grouped_data, sorted_keys):
                    writer.write(key, reduced)
                    result.keys_reduced += 1
                writer.commit()

            self._advance(result, TaskState.DONE)
            self._log(f"Reduce task {reduce_task} of job {job_name} completed: "
                      f"{result.records_read} records in, {result.keys_reduced} keys out -> {out_file}")

        except ReduceTaskError as e:
            result.fail(e)
            print(f"[{datetime.now()}] Reduce task {reduce_task} of job {job_name} failed: {e}")
            if raise_on_error:
                raise

        except Exception as e:
            result.fail(e)
            print(f"[{datetime.now()}] Reduce task {reduce_task} of job {job_name} "
                  f"failed unexpectedly: {e}")
            raise

        return result

    def _read_and_group(self, job_name, reduce_task, n_map, result):
        """Shuffle phase: read every shard and group values by key."""
        with ExitStack() as stack:
            decoders = self.intermediate_manager.open_shards(job_name, reduce_task, n_map, stack)

            self._advance(result, TaskState.READING)
            grouped_data = self.shuffle_phase.group(
                self._count_records(decoder, result) for decoder in decoders
            )

        # Inputs are closed; no key will gain more values from here on
        self._advance(result, TaskState.GROUPING)
        return grouped_data

    def _count_records(self, decoder, result):
        for record in decoder:
            result.records_read += 1
            yield record

    def _advance(self, result, state):
        result.advance(state)
        self._log(f"Reduce task {result.reduce_task} of job {result.job_name} -> {state.value}")

    def _log(self, message):
        if self.verbose:
            print(f"[{datetime.now()}] {message}")


def do_reduce(job_name, reduce_task, out_file, n_map, reduce_function, **kwargs):
    """Run one reduce task with a throwaway executor.

    Keyword arguments go to TaskExecutor, except raise_on_error which goes
    to execute_reduce.
    """
    raise_on_error = kwargs.pop('raise_on_error', False)
    executor = TaskExecutor(reduce_function=reduce_function, **kwargs)
    return executor.execute_reduce(job_name, reduce_task, out_file, n_map,
                                   raise_on_error=raise_on_error)
