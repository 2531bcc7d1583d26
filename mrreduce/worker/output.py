import os
import tempfile

from mrreduce.framework.codec import encode_record
from mrreduce.utils.errors import OutputOpenError


class OutputWriter:
    """Writes reduce output so that a task attempt is all-or-nothing.

    Records go to a temporary file next to the final path. commit()
    renames it over the final path; abort() throws it away. Re-running
    a task therefore replaces its output instead of appending to it.
    """

    def __init__(self, out_file):
        self.out_file = out_file
        self.temp_path = None
        self.records_written = 0
        self._file = None

    def open(self):
        out_dir = os.path.dirname(os.path.abspath(self.out_file))
        try:
            fd, self.temp_path = tempfile.mkstemp(
                dir=out_dir, prefix=f".{os.path.basename(self.out_file)}.", suffix='.tmp')
            self._file = os.fdopen(fd, 'w', encoding='utf-8')
        except OSError as e:
            raise OutputOpenError(self.out_file, cause=e) from e
        return self

    def write(self, key, value):
        try:
            self._file.write(encode_record(key, value))
        except OSError as e:
            raise OutputOpenError(self.out_file, cause=e) from e
        self.records_written += 1

    def commit(self):
        """Flush and atomically move the finished file into place."""
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
            os.replace(self.temp_path, self.out_file)
        except OSError as e:
            raise OutputOpenError(self.out_file, cause=e) from e
        self.temp_path = None

    def abort(self):
        """Drop the temporary file, leaving out_file as it was."""
        if self._file is not None and not self._file.closed:
            self._file.close()
        if self.temp_path and os.path.exists(self.temp_path):
            os.remove(self.temp_path)
        self.temp_path = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        # Anything short of an explicit commit() is discarded
        self.abort()
        return False
