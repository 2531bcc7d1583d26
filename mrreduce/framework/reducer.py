from concurrent import futures

from mrreduce.framework.codec import is_encodable
from mrreduce.utils.errors import ReductionError


class ReducePhase:
    """Handles the reduce phase of MapReduce"""

    def __init__(self, reduce_function, max_workers=1):
        """
        Args:
            reduce_function: User-defined reduce function(key, values) -> str
            max_workers: Threads used to reduce independent keys (1 = sequential)
        """
        self.reduce_function = reduce_function
        self.max_workers = max_workers

    def execute(self, grouped_data, sorted_keys):
        """Execute reduce function once per key

        Args:
            grouped_data: Dict of {key: [values]}
            sorted_keys: Keys of grouped_data in output order

        Yields:
            (key, reduced_value) tuples in the order of sorted_keys, whatever
            order the reductions finish in
        """
        if self.max_workers <= 1:
            for key in sorted_keys:
                yield key, self._reduce_one(key, grouped_data[key])
            return

        with futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            # Executor.map hands back results in submission order
            results = pool.map(lambda k: self._reduce_one(k, grouped_data[k]), sorted_keys)
            for key, reduced in zip(sorted_keys, results):
                yield key, reduced

    def _reduce_one(self, key, values):
        try:
            result = self.reduce_function(key, values)
        except Exception as e:
            raise ReductionError(key, e) from e

        if not isinstance(result, str):
            raise ReductionError(key, TypeError(
                f"reduce function must return str, got {type(result).__name__}"))
        if not is_encodable(result):
            raise ReductionError(key, ValueError(
                "reduce function returned text that is not valid Unicode"))
        return result


# Example reduce function for word count
def word_count_reduce(word, counts):
    """Reduce function for word count

    Args:
        word: The word
        counts: List of counts as text (e.g. all "1"s)

    Returns:
        Total count as text
    """
    return str(sum(int(c) for c in counts))


def concat_reduce(key, values, separator=' '):
    """Joins every value for a key, in arrival order."""
    return separator.join(values)
