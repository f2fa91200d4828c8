"""
Hash Index Module

Fixed-size hash table that maps resource keys to the cache nodes holding
them. Collisions are resolved by chaining: every bucket is a small list of
(key, value) pairs searched with exact key equality.

The bucket count is chosen once at construction and never changes, so a
badly undersized index degrades towards O(chain length) lookups instead of
paying for a resize.
"""

from typing import Any, Iterator, List, Optional, Tuple

DEFAULT_BUCKET_COUNT = 128


class HashIndex:
    """
    Bucketed-chaining hash table with a fixed number of buckets.

    The index stores references only; it never copies or owns the values
    it points at.

    Usage:
        index = HashIndex(bucket_count=16)
        index.insert("index.html", node)
        index.lookup("index.html")  # -> node
        index.remove("index.html")  # -> node

    Attributes:
        bucket_count: Number of buckets (fixed for the index's lifetime)
    """

    def __init__(self, bucket_count: int = 0):
        """
        Initialize the index.

        Args:
            bucket_count: Number of buckets (0 selects DEFAULT_BUCKET_COUNT)

        Raises:
            ValueError: If bucket_count is negative
        """
        if bucket_count < 0:
            raise ValueError("bucket_count must not be negative")
        self.bucket_count = bucket_count or DEFAULT_BUCKET_COUNT
        self._buckets: List[List[Tuple[str, Any]]] = [[] for _ in range(self.bucket_count)]
        self._count = 0

    def _bucket_for(self, key: str) -> List[Tuple[str, Any]]:
        return self._buckets[hash(key) % self.bucket_count]

    def insert(self, key: str, value: Any) -> None:
        """
        Insert a reference for key, replacing any existing one.

        Time Complexity: O(1) average
        """
        bucket = self._bucket_for(key)
        for position, (existing, _) in enumerate(bucket):
            if existing == key:
                bucket[position] = (key, value)
                return

        bucket.append((key, value))
        self._count += 1

    def lookup(self, key: str) -> Optional[Any]:
        """
        Return the reference stored for key, or None if absent.

        Time Complexity: O(1) average
        """
        for existing, value in self._bucket_for(key):
            if existing == key:
                return value
        return None

    def remove(self, key: str) -> Optional[Any]:
        """
        Remove key from the index.

        Returns:
            The reference that was stored for key, or None if absent

        Time Complexity: O(1) average
        """
        bucket = self._bucket_for(key)
        for position, (existing, value) in enumerate(bucket):
            if existing == key:
                del bucket[position]
                self._count -= 1
                return value
        return None

    def keys(self) -> Iterator[str]:
        """Iterate over stored keys in bucket order."""
        for bucket in self._buckets:
            for key, _ in bucket:
                yield key

    def longest_chain(self) -> int:
        """Length of the longest bucket chain (0 for an empty index)."""
        return max(len(bucket) for bucket in self._buckets)

    def __contains__(self, key: str) -> bool:
        return any(existing == key for existing, _ in self._bucket_for(key))

    def __len__(self) -> int:
        return self._count
