"""Cache module for the web server."""

from .exceptions import CacheAllocationError, CacheError, EntryNotFoundError
from .hash_index import HashIndex
from .recency import Link, RecencyList
from .store import CacheEntry, ResourceCache

__all__ = [
    "CacheAllocationError",
    "CacheEntry",
    "CacheError",
    "EntryNotFoundError",
    "HashIndex",
    "Link",
    "RecencyList",
    "ResourceCache",
]
