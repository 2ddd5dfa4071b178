"""LIFO stack of singly-linked nodes."""

from __future__ import annotations

from utilkit.linked_list import SinglyLinkedList, SNode

__all__ = ["Stack"]


class Stack:
    """Last-in first-out stack of :class:`SNode` objects."""

    def __init__(self) -> None:
        self._list = SinglyLinkedList()

    def push(self, node: SNode) -> None:
        """Put ``node`` on top of the stack."""
        self._list.appendleft(node)

    def pop(self) -> SNode:
        """Remove and return the top node; raises IndexError when empty."""
        return self._list.popleft()

    def top(self) -> SNode:
        """Return the top node without removing it."""
        if self._list.head is None:
            raise IndexError("stack is empty")
        return self._list.head

    def __len__(self) -> int:
        return sum(1 for _ in self._list)