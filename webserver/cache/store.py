"""
Resource Cache Module

This module implements the bounded in-memory cache that sits in front of
the file system.

The cache combines two structures that always hold the same set of nodes:
- HashIndex: key -> node, for O(1) average lookup
- RecencyList: nodes ordered MRU -> LRU, for O(1) promotion and eviction

Every public operation runs under one lock covering both structures, so a
get() promotion never observes an index and list that disagree.

The cache stores each entry's creation time but never acts on it. Deciding
when an entry is too old to serve belongs to the caller (see
RequestDispatcher).
"""

import logging
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TextIO

from .exceptions import CacheAllocationError, EntryNotFoundError
from .hash_index import HashIndex
from .recency import Link, RecencyList

logger = logging.getLogger(__name__)


class _CacheNode(Link):
    """Cache-owned storage for one resource."""

    __slots__ = ("key", "content_type", "content", "created_at")

    def __init__(self, key: str, content_type: str, content: bytes, created_at: float):
        super().__init__()
        self.key = key
        self.content_type = content_type
        self.content = content
        self.created_at = created_at


@dataclass(frozen=True)
class CacheEntry:
    """
    Read-only view of a cached resource.

    Attributes:
        key: Resource identifier (request path)
        content_type: MIME type of the resource
        content: The cached bytes
        content_length: Number of bytes in content
        created_at: Epoch seconds when the entry was inserted or replaced
    """
    key: str
    content_type: str
    content: bytes
    content_length: int
    created_at: float
    _node: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_node(cls, node: _CacheNode) -> "CacheEntry":
        return cls(
            key=node.key,
            content_type=node.content_type,
            content=node.content,
            content_length=len(node.content),
            created_at=node.created_at,
            _node=node,
        )

    def age(self, now: float) -> float:
        """Seconds elapsed between created_at and now."""
        return now - self.created_at


class ResourceCache:
    """
    Fixed-capacity, recency-ordered cache of static resources.

    This class provides O(1) average-case time complexity for:
    - get: Look up an entry and mark it most recently used
    - put: Insert or replace an entry, evicting the LRU entry when full
    - delete: Remove a specific entry

    Usage:
        cache = ResourceCache(max_entries=50)
        cache.put("index.html", "text/html", b"<h1>hi</h1>")
        entry = cache.get("index.html")
        if entry is not None:
            cache.delete(entry)

    Attributes:
        max_entries: Capacity before eviction (0 = unbounded)
        index_buckets: Number of hash index buckets in use
    """

    def __init__(
            self,
            max_entries: int = 0,
            index_buckets: int = 0,
            clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Maximum number of entries (0 = unbounded)
            index_buckets: Hash index bucket count (0 = index default)
            clock: Source of creation timestamps

        Raises:
            ValueError: If max_entries or index_buckets is negative
        """
        if max_entries < 0:
            raise ValueError("max_entries must not be negative")
        self.max_entries = max_entries
        self._clock = clock
        self._index = HashIndex(index_buckets)
        self._recency = RecencyList()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def index_buckets(self) -> int:
        return self._index.bucket_count

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Retrieve the entry for key and mark it most recently used.

        Args:
            key: Resource identifier

        Returns:
            A read-only view of the entry, or None on a miss

        Time Complexity: O(1) average

        Note: No age check happens here and created_at is left unchanged.
        """
        with self._lock:
            node = self._index.lookup(key)
            if node is None:
                self._misses += 1
                return None

            self._recency.move_to_head(node)
            self._hits += 1
            return CacheEntry.from_node(node)

    def put(
            self,
            key: str,
            content_type: str,
            content: bytes,
            content_length: Optional[int] = None,
    ) -> None:
        """
        Insert or replace the entry for key.

        Args:
            key: Resource identifier
            content_type: MIME type of the resource
            content: Resource bytes (copied into cache-owned storage)
            content_length: Number of leading bytes of content to store
                            (default: all of it)

        Raises:
            ValueError: If content_length is outside 0..len(content)
            CacheAllocationError: If memory runs out building the entry;
                                  the cache is left unchanged

        Time Complexity: O(1) average

        Replacing an existing key never changes the entry count and never
        evicts. Adding a new key to a full cache evicts the LRU entry.
        """
        if content_length is None:
            content_length = len(content)
        elif not 0 <= content_length <= len(content):
            raise ValueError(
                f"content_length {content_length} outside 0..{len(content)}"
            )

        try:
            data = bytes(content[:content_length])
            created_at = self._clock()
            fresh = _CacheNode(key, content_type, data, created_at)
        except MemoryError as exc:
            raise CacheAllocationError(key) from exc

        with self._lock:
            node = self._index.lookup(key)
            if node is not None:
                node.content_type = content_type
                node.content = data
                node.created_at = created_at
                self._recency.move_to_head(node)
                return

            self._index.insert(key, fresh)
            self._recency.insert_at_head(fresh)

            if self.max_entries and len(self._recency) > self.max_entries:
                evicted = self._recency.remove_tail()
                self._index.remove(evicted.key)
                self._evictions += 1
                logger.debug(f"Evicted {evicted.key} ({len(evicted.content)} bytes)")

    def delete(self, entry: CacheEntry) -> None:
        """
        Remove an entry previously returned by this cache.

        Args:
            entry: View obtained from get() on this cache

        Raises:
            EntryNotFoundError: If the entry is not live in this cache
                                (already deleted, evicted, or foreign)

        Time Complexity: O(1) average
        """
        with self._lock:
            node = self._index.lookup(entry.key)
            if node is None or node is not entry._node:
                raise EntryNotFoundError(entry.key)

            self._recency.remove(node)
            self._index.remove(node.key)

    def size(self) -> int:
        """Get the current number of entries."""
        with self._lock:
            return len(self._recency)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        """Check membership without updating recency order."""
        with self._lock:
            return key in self._index

    def entries(self) -> List[CacheEntry]:
        """Snapshot of all entries, most recently used first."""
        with self._lock:
            return [CacheEntry.from_node(node) for node in self._recency]

    def keys(self) -> List[str]:
        """Snapshot of all keys, most recently used first."""
        with self._lock:
            return [node.key for node in self._recency]

    def format_entries(self) -> str:
        """
        Render the diagnostic listing, one line per entry from MRU to LRU.

        Each line reads: key, content type, length in bytes, created_at.
        """
        lines = []
        for position, entry in enumerate(self.entries()):
            created = datetime.fromtimestamp(entry.created_at).isoformat(timespec="seconds")
            lines.append(
                f"{position}: {entry.key} {entry.content_type} "
                f"{entry.content_length} {created}"
            )
        return "\n".join(lines)

    def dump(self, stream: Optional[TextIO] = None) -> None:
        """Write the diagnostic listing to stream (default: stdout)."""
        stream = stream if stream is not None else sys.stdout
        listing = self.format_entries()
        if listing:
            stream.write(listing + "\n")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the cache.

        Returns:
            Dictionary containing:
            - size: Entries currently cached
            - max_entries: Capacity (0 = unbounded)
            - index_buckets: Hash index bucket count
            - longest_chain: Longest hash index collision chain
            - utilization: size as a fraction of max_entries
            - hits / misses / evictions: Counters since creation
            - mru_key / lru_key: Ends of the recency order
        """
        with self._lock:
            size = len(self._recency)
            head = self._recency.head()
            tail = self._recency.tail()
            return {
                "size": size,
                "max_entries": self.max_entries,
                "index_buckets": self._index.bucket_count,
                "longest_chain": self._index.longest_chain(),
                "utilization": size / self.max_entries if self.max_entries > 0 else 0,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "mru_key": head.key if head is not None else None,
                "lru_key": tail.key if tail is not None else None,
            }
