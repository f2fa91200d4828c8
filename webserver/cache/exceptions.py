"""Exceptions raised by the resource cache."""


class CacheError(Exception):
    """Base class for resource cache errors."""


class EntryNotFoundError(CacheError, LookupError):
    """The entry passed to delete() is not live in this cache."""

    def __init__(self, key: str):
        super().__init__(f"entry not found in cache: {key!r}")
        self.key = key


class CacheAllocationError(CacheError, MemoryError):
    """Memory ran out while building or replacing an entry.

    The cache is left exactly as it was before the failed call.
    """

    def __init__(self, key: str):
        super().__init__(f"could not allocate cache entry for {key!r}")
        self.key = key
