"""Doubly and singly linked lists built from caller-owned nodes."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

__all__ = ["Node", "LinkedList", "SNode", "SinglyLinkedList", "check_links"]


class Node:
    """A node of a doubly linked list, carrying an arbitrary value."""

    __slots__ = ("value", "next", "prev")

    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.next: Node | None = None
        self.prev: Node | None = None

    def __repr__(self) -> str:
        return f"Node({self.value!r})"


def check_links(first: Node | None, last: Node | None) -> bool:
    """Check that ``first`` .. ``last`` looks like a linked run of nodes.

    The run is walked from both ends towards the middle, verifying the
    back-links seen on the way.
    """
    if first is None or last is None:
        return False
    if first is last:
        return True
    p1: Node | None = first
    p2: Node | None = last
    p1_prev = first.prev
    p2_next = last.next
    while (
        p1 is not None
        and p2 is not None
        and p1 is not p2
        and p1.next is not p2.prev
        and p1.prev is p1_prev
        and p2.next is p2_next
    ):
        p1_prev = p1
        p1 = p1.next
        p2_next = p2
        p2 = p2.prev
    return p1 is not None and p2 is not None and (p1 is p2 or p1.next is p2.prev)


class LinkedList:
    """Doubly linked list with head and tail references."""

    def __init__(self) -> None:
        self.head: Node | None = None
        self.tail: Node | None = None

    def append(self, node: Node) -> None:
        """Add ``node`` at the tail."""
        node.prev = self.tail
        node.next = None
        if self.tail is not None:
            self.tail.next = node
        self.tail = node
        if self.head is None:
            self.head = node

    def appendleft(self, node: Node) -> None:
        """Add ``node`` at the head."""
        node.prev = None
        node.next = self.head
        if self.head is not None:
            self.head.prev = node
        self.head = node
        if self.tail is None:
            self.tail = node

    def pop(self) -> Node:
        """Remove and return the tail node; raises IndexError when empty."""
        node = self.tail
        if node is None:
            raise IndexError("pop from an empty list")
        self.tail = node.prev
        if self.tail is not None:
            self.tail.next = None
        else:
            self.head = None
        return node

    def popleft(self) -> Node:
        """Remove and return the head node; raises IndexError when empty."""
        node = self.head
        if node is None:
            raise IndexError("pop from an empty list")
        self.head = node.next
        if self.head is not None:
            self.head.prev = None
        else:
            self.tail = None
        return node

    def remove_node(self, node: Node) -> None:
        """Unlink ``node``, which must belong to this list."""
        if node.prev is None:
            self.head = node.next
            if self.head is None:
                self.tail = None
            else:
                self.head.prev = None
        elif node.next is None:
            self.tail = node.prev
            self.tail.next = None
        else:
            node.next.prev = node.prev
            node.prev.next = node.next

    def find_node(self, node: Node) -> Node | None:
        """Return ``node`` if it is in the list, otherwise None."""
        for current in self:
            if current is node:
                return current
        return None

    def remove_nodes(self, start: Node, end: Node) -> None:
        """Unlink the run ``start`` .. ``end``.

        Raises ValueError when ``start`` is not in the list or the run is
        not properly linked. The removed run keeps its internal links.
        """
        if self.find_node(start) is None or not check_links(start, end):
            raise ValueError("invalid node range")
        if start.prev is None:
            self.head = end.next
            if self.head is None:
                self.tail = None
            else:
                self.head.prev = None
        elif end.next is None:
            start.prev.next = None
            self.tail = start.prev
        else:
            start.prev.next = end.next
            end.next.prev = start.prev

    def insert_node(self, after: Node | None, node: Node) -> None:
        """Insert ``node`` after ``after``, or at the head when ``after`` is None."""
        if after is None:
            following = self.head
            self.head = node
        else:
            following = after.next
            after.next = node
        node.prev = after
        node.next = following
        if following is not None:
            following.prev = node
        else:
            self.tail = node

    def insert_nodes(
        self, after: Node | None, start: Node | None, end: Node | None
    ) -> None:
        """Splice the linked run ``start`` .. ``end`` in after ``after``.

        With ``after`` None the run is prepended. Raises ValueError when the
        run is not properly linked.
        """
        if start is None or end is None or not check_links(start, end):
            raise ValueError("invalid node range")
        if self.head is None:
            self.head = start
            self.tail = end
        elif after is None:
            end.next = self.head
            self.head.prev = end
            self.head = start
            start.prev = None
        else:
            following = after.next
            after.next = start
            start.prev = after
            end.next = following
            if following is not None:
                following.prev = end
            else:
                self.tail = end

    def __iter__(self) -> Iterator[Node]:
        node = self.head
        while node is not None:
            yield node
            node = node.next


class SNode:
    """A node of a singly linked list, carrying an arbitrary value."""

    __slots__ = ("value", "next")

    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.next: SNode | None = None

    def __repr__(self) -> str:
        return f"SNode({self.value!r})"


class SinglyLinkedList:
    """Singly linked list with a head reference."""

    def __init__(self) -> None:
        self.head: SNode | None = None

    def append(self, node: SNode, after: SNode | None = None) -> None:
        """Add ``node`` at the end, walking from ``after`` (or the head)."""
        current = after if after is not None else self.head
        if current is None:
            self.head = node
        else:
            while current.next is not None:
                current = current.next
            current.next = node
        node.next = None

    def appendleft(self, node: SNode) -> None:
        """Add ``node`` at the head."""
        node.next = self.head
        self.head = node

    def pop(self, after: SNode | None = None) -> SNode:
        """Remove and return the last node, walking from ``after`` (or the head).

        Raises IndexError when the list is empty or nothing follows ``after``.
        """
        if self.head is None:
            raise IndexError("pop from an empty list")
        if self.head.next is None:
            node = self.head
            self.head = None
            return node
        n1 = after if after is not None else self.head
        n2 = n1.next
        if n2 is None:
            raise IndexError("no node follows the given node")
        while n2.next is not None:
            n1 = n2
            n2 = n2.next
        n1.next = None
        return n2

    def popleft(self) -> SNode:
        """Remove and return the head node; raises IndexError when empty."""
        node = self.head
        if node is None:
            raise IndexError("pop from an empty list")
        self.head = node.next
        return node

    def remove_node(self, node: SNode) -> None:
        """Unlink ``node``; raises ValueError when it is not in the list."""
        prev: SNode | None = None
        current = self.head
        while current is not None and current is not node:
            prev = current
            current = current.next
        if current is None:
            raise ValueError("node not in list")
        if prev is None:
            self.head = current.next
        else:
            prev.next = current.next

    def insert_node(self, after: SNode | None, node: SNode) -> None:
        """Insert ``node`` after ``after``, or at the head when ``after`` is None."""
        if after is None:
            node.next = self.head
            self.head = node
        else:
            node.next = after.next
            after.next = node

    def __iter__(self) -> Iterator[SNode]:
        node = self.head
        while node is not None:
            yield node
            node = node.next