import os
import tempfile

from mrreduce.framework.codec import RecordDecoder, encode_record
from mrreduce.utils.errors import InputOpenError
from mrreduce.utils.naming import reduce_name, shard_paths


class IntermediateFileManager:
    """Manages the intermediate shard files of a job"""

    def __init__(self, base_dir='.'):
        self.base_dir = base_dir

    def shard_path(self, job_name, map_task, reduce_task):
        return os.path.join(self.base_dir, reduce_name(job_name, map_task, reduce_task))

    def open_shards(self, job_name, reduce_task, n_map, stack):
        """Open every shard feeding a reduce task, read-only.

        The files are registered on `stack` so the caller closes them.
        Any shard that cannot be opened fails the whole task; none are
        skipped.

        Returns:
            List of RecordDecoder, one per map task, in map-task order
        """
        decoders = []
        for map_task, path in enumerate(shard_paths(job_name, reduce_task, n_map, self.base_dir)):
            try:
                f = stack.enter_context(open(path, 'r', encoding='utf-8'))
            except OSError as e:
                raise InputOpenError(path, map_task=map_task, cause=e) from e
            decoders.append(RecordDecoder(f, path))
        return decoders

    def write_shard(self, job_name, map_task, reduce_task, records):
        """Write one map task's output for one reduce task.

        Args:
            records: Iterable of (key, value) text pairs

        Returns:
            Path of the written shard
        """
        os.makedirs(self.base_dir, exist_ok=True)
        filepath = self.shard_path(job_name, map_task, reduce_task)

        # Write to a temporary file first, then rename into place
        fd, temp_path = tempfile.mkstemp(dir=self.base_dir, prefix='.shard-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                for key, value in records:
                    f.write(encode_record(key, value))
            os.replace(temp_path, filepath)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

        return filepath

    def read_records(self, filepath):
        """Read a shard or reduce output file into a list of (key, value)."""
        with open(filepath, 'r', encoding='utf-8') as f:
            return list(RecordDecoder(f, filepath))

    def cleanup_job_files(self, job_name):
        """Clean up intermediate shards of a job.

        Reduce outputs (mrtmp.<job>-res-<r>) are left alone.
        """
        prefix = f"mrtmp.{job_name}-"
        removed = []
        for filename in os.listdir(self.base_dir):
            if not filename.startswith(prefix):
                continue
            suffix = filename[len(prefix):]
            parts = suffix.split('-')
            if len(parts) == 2 and all(p.isdigit() for p in parts):
                os.remove(os.path.join(self.base_dir, filename))
                removed.append(filename)
        return removed
