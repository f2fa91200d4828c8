"""
Recency List Module

Doubly-linked list that keeps cache nodes in recency order:
- The most recently used node sits right after the head sentinel
- The least recently used node sits right before the tail sentinel
- On access (get/put), the node is moved to the head
- On eviction, the node before the tail sentinel is removed

Nodes carry their own prev/next links, so callers that already hold a node
can move or remove it in O(1) without searching the list.
"""

from typing import Iterator, Optional


class Link:
    """A node that can be threaded into a RecencyList."""

    __slots__ = ("prev", "next")

    def __init__(self):
        self.prev: Optional["Link"] = None
        self.next: Optional["Link"] = None

    @property
    def is_linked(self) -> bool:
        return self.prev is not None


class RecencyList:
    """
    Sentinel-bounded doubly-linked list ordered from MRU (head) to LRU (tail).

    Usage:
        recency = RecencyList()
        recency.insert_at_head(node)
        recency.move_to_head(node)   # mark as most recently used
        lru = recency.remove_tail()  # evict least recently used
    """

    def __init__(self):
        self._head = Link()
        self._tail = Link()
        self._head.next = self._tail
        self._tail.prev = self._head
        self._count = 0

    @staticmethod
    def _unlink(link: Link) -> None:
        link.prev.next = link.next
        link.next.prev = link.prev
        link.prev = None
        link.next = None

    def _link_after_head(self, link: Link) -> None:
        link.prev = self._head
        link.next = self._head.next
        self._head.next.prev = link
        self._head.next = link

    def insert_at_head(self, link: Link) -> None:
        """
        Insert a detached link as the most recently used element.

        Raises:
            ValueError: If the link is already in a list

        Time Complexity: O(1)
        """
        if link.is_linked:
            raise ValueError("link is already in a list")
        self._link_after_head(link)
        self._count += 1

    def move_to_head(self, link: Link) -> None:
        """
        Mark a linked element as the most recently used.

        Raises:
            ValueError: If the link is not in a list

        Time Complexity: O(1)
        """
        if not link.is_linked:
            raise ValueError("link is not in a list")
        if self._head.next is link:
            return
        self._unlink(link)
        self._link_after_head(link)

    def remove(self, link: Link) -> None:
        """
        Detach an arbitrary element.

        Raises:
            ValueError: If the link is not in a list

        Time Complexity: O(1)
        """
        if not link.is_linked:
            raise ValueError("link is not in a list")
        self._unlink(link)
        self._count -= 1

    def remove_tail(self) -> Optional[Link]:
        """
        Detach and return the least recently used element.

        Returns:
            The removed link, or None if the list is empty

        Time Complexity: O(1)
        """
        if self._count == 0:
            return None
        link = self._tail.prev
        self.remove(link)
        return link

    def head(self) -> Optional[Link]:
        """Most recently used element, or None when empty."""
        return self._head.next if self._count else None

    def tail(self) -> Optional[Link]:
        """Least recently used element, or None when empty."""
        return self._tail.prev if self._count else None

    def __iter__(self) -> Iterator[Link]:
        link = self._head.next
        while link is not self._tail:
            yield link
            link = link.next

    def __len__(self) -> int:
        return self._count
