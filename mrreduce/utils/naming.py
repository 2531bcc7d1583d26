import os


def reduce_name(job_name, map_task, reduce_task):
    """Name of the intermediate file map task `map_task` wrote for `reduce_task`.

    Shared with the map-phase producer, so it must not change.
    """
    return f"mrtmp.{job_name}-{map_task}-{reduce_task}"


def merge_name(job_name, reduce_task):
    """Conventional output name of a reduce task, read by the merger."""
    return f"mrtmp.{job_name}-res-{reduce_task}"


def shard_paths(job_name, reduce_task, n_map, base_dir='.'):
    """Paths of all nMap shards feeding one reduce task, in map-task order."""
    if n_map < 0:
        raise ValueError(f"n_map must be >= 0, got {n_map}")
    return [
        os.path.join(base_dir, reduce_name(job_name, m, reduce_task))
        for m in range(n_map)
    ]
