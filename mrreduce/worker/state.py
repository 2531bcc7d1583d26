import time
from enum import Enum
from typing import Dict, List, Optional


class TaskState(Enum):
    """Lifecycle of a single reduce task invocation."""
    OPENING_INPUTS = "opening_inputs"              # Resolving and opening shards
    READING = "reading"                            # Decoding records
    GROUPING = "grouping"                          # All shards drained, groups final
    SORTING = "sorting"                            # Ordering distinct keys
    REDUCING_AND_WRITING = "reducing_and_writing"  # Reduce + emit in key order
    DONE = "done"                                  # Output committed
    FATAL = "fatal"                                # Aborted, output untouched


TERMINAL_STATES = (TaskState.DONE, TaskState.FATAL)

# Forward edges; FATAL may be entered from any non-terminal state
TRANSITIONS = {
    TaskState.OPENING_INPUTS: TaskState.READING,
    TaskState.READING: TaskState.GROUPING,
    TaskState.GROUPING: TaskState.SORTING,
    TaskState.SORTING: TaskState.REDUCING_AND_WRITING,
    TaskState.REDUCING_AND_WRITING: TaskState.DONE,
}


class ReduceTaskResult:
    """
    Outcome of one reduce task invocation.

    Tracks the state machine as the task runs and ends up holding either
    the committed output (success) or the error that aborted the task.
    """

    def __init__(self, job_name: str, reduce_task: int, out_file: str, n_map: int):
        self.job_name = job_name
        self.reduce_task = reduce_task
        self.out_file = out_file
        self.n_map = n_map
        self.state = TaskState.OPENING_INPUTS
        self.history: List[Dict] = [{'timestamp': time.time(), 'state': self.state.value}]

        self.records_read = 0
        self.keys_reduced = 0
        self.error_kind: Optional[str] = None
        self.error_message: Optional[str] = None
        self.started_at = time.time()
        self.completed_at: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.state == TaskState.DONE

    def advance(self, new_state: TaskState):
        """Move along the state machine, rejecting illegal transitions."""
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Task already finished in state {self.state.value}")
        if new_state != TaskState.FATAL and TRANSITIONS.get(self.state) != new_state:
            raise RuntimeError(
                f"Illegal transition {self.state.value} -> {new_state.value}")

        self.state = new_state
        self.history.append({'timestamp': time.time(), 'state': new_state.value})
        if new_state in TERMINAL_STATES:
            self.completed_at = time.time()

    def fail(self, error):
        self.error_kind = getattr(error, 'kind', type(error).__name__)
        self.error_message = str(error)
        self.advance(TaskState.FATAL)

    def to_dict(self) -> Dict:
        """Serialize result to dictionary."""
        return {
            'job_name': self.job_name,
            'reduce_task': self.reduce_task,
            'out_file': self.out_file,
            'n_map': self.n_map,
            'state': self.state.value,
            'success': self.success,
            'records_read': self.records_read,
            'keys_reduced': self.keys_reduced,
            'error_kind': self.error_kind,
            'error_message': self.error_message,
            'history': [h['state'] for h in self.history],
        }

    def __repr__(self):
        return (f"ReduceTaskResult({self.job_name}, reduce={self.reduce_task}, "
                f"state={self.state.value})")
