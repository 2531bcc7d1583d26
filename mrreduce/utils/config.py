import os

INTERMEDIATE_DIR_ENV = 'MAPREDUCE_INTERMEDIATE_DIR'
REDUCE_WORKERS_ENV = 'MAPREDUCE_REDUCE_WORKERS'

DEFAULT_INTERMEDIATE_DIR = '.'
DEFAULT_REDUCE_WORKERS = 1


def resolve_intermediate_dir(intermediate_dir=None):
    """Explicit argument wins, then the environment, then the default."""
    if intermediate_dir:
        return intermediate_dir
    return os.environ.get(INTERMEDIATE_DIR_ENV) or DEFAULT_INTERMEDIATE_DIR


def resolve_reduce_workers(max_workers=None):
    """Number of threads used for reduction (1 means sequential)."""
    if max_workers is None:
        env_value = os.environ.get(REDUCE_WORKERS_ENV)
        if not env_value:
            return DEFAULT_REDUCE_WORKERS
        try:
            max_workers = int(env_value)
        except ValueError:
            raise ValueError(
                f"{REDUCE_WORKERS_ENV} must be an integer, got {env_value!r}"
            ) from None

    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")
    return max_workers
