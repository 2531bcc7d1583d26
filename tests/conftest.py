import pytest

from mrreduce.worker.intermediate import IntermediateFileManager


@pytest.fixture
def manager(tmp_path):
    """Intermediate file manager rooted in a per-test directory."""
    return IntermediateFileManager(base_dir=str(tmp_path))


@pytest.fixture
def write_shards(manager):
    """Write one shard per entry of `shards` for the given job and reduce task."""
    def _write(job_name, reduce_task, shards):
        return [
            manager.write_shard(job_name, map_task, reduce_task, records)
            for map_task, records in enumerate(shards)
        ]
    return _write
