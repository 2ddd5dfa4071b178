"""FIFO queue of linked-list nodes."""

from __future__ import annotations

from utilkit.linked_list import LinkedList, Node

__all__ = ["Queue"]


class Queue:
    """First-in first-out queue of :class:`Node` objects."""

    def __init__(self) -> None:
        self._list = LinkedList()

    def enqueue(self, node: Node) -> None:
        """Add ``node`` at the back of the queue."""
        self._list.append(node)

    def dequeue(self) -> Node:
        """Remove and return the front node; raises IndexError when empty."""
        return self._list.popleft()

    def peek_first(self) -> Node:
        """Return the front node without removing it."""
        if self._list.head is None:
            raise IndexError("queue is empty")
        return self._list.head

    def peek_last(self) -> Node:
        """Return the back node without removing it."""
        if self._list.tail is None:
            raise IndexError("queue is empty")
        return self._list.tail

    def __len__(self) -> int:
        return sum(1 for _ in self._list)