class ReduceTaskError(Exception):
    """Base class for failures that abort a reduce task.

    Every subclass is fatal to the task invocation. Retrying is left to
    whoever scheduled the task.
    """

    kind = 'reduce_task_error'


class InputOpenError(ReduceTaskError):
    """An intermediate shard is missing or unreadable."""

    kind = 'input_open_failure'

    def __init__(self, path, map_task=None, cause=None):
        self.path = path
        self.map_task = map_task
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to open intermediate file {path} "
                         f"(map task {map_task}){detail}")


class MalformedRecordError(ReduceTaskError):
    """A record could not be decoded. Distinct from a clean end of file."""

    kind = 'malformed_record'

    def __init__(self, path, line_number, reason):
        self.path = path
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed record in {path} at line {line_number}: {reason}")


class ReductionError(ReduceTaskError):
    """The user reduce function raised or returned a non-text value."""

    kind = 'reduction_failure'

    def __init__(self, key, cause):
        self.key = key
        self.cause = cause
        super().__init__(f"Reduce function failed for key {key!r}: {cause}")


class OutputOpenError(ReduceTaskError):
    """The output file (or its temporary sibling) could not be written."""

    kind = 'output_open_failure'

    def __init__(self, path, cause=None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to write output file {path}{detail}")
