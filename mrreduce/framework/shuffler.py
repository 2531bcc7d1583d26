from collections import defaultdict


class ShufflePhase:
    """Groups intermediate records by key and orders the keys.

    The grouped partition lives entirely in memory, so memory use grows
    linearly with the size of the reduce task's input.
    """

    def group(self, record_streams):
        """Group values by key across all shards.

        Args:
            record_streams: Iterable of record iterables, one per shard, in
                            map-task order

        Returns:
            Dict of {key: [value1, value2, ...]}, values ordered by shard
            index and then by position within the shard
        """
        grouped_data = defaultdict(list)

        # Every stream is drained before anything is returned
        for records in record_streams:
            for key, value in records:
                grouped_data[key].append(value)

        return dict(grouped_data)

    def sort_keys(self, grouped_data):
        """Distinct keys in ascending order.

        Code point order on str is the same as byte order on UTF-8.
        """
        return sorted(grouped_data)
