"""Bounded first-in last-out container."""

from __future__ import annotations

from typing import Any

__all__ = ["FiloFullError", "FiloEmptyError", "Filo"]


class FiloFullError(Exception):
    """Raised when pushing onto a full container."""


class FiloEmptyError(IndexError):
    """Raised when popping or peeking an empty container."""


class Filo:
    """A stack holding at most ``max_size`` items."""

    def __init__(self, max_size: int) -> None:
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        self.max_size = max_size
        self._items: list[Any] = []

    def push(self, item: Any) -> None:
        """Put ``item`` on top; raises FiloFullError when full."""
        if len(self._items) >= self.max_size:
            raise FiloFullError("filo is full")
        self._items.append(item)

    def pop(self) -> Any:
        """Remove and return the top item; raises FiloEmptyError when empty."""
        if not self._items:
            raise FiloEmptyError("filo is empty")
        return self._items.pop()

    def peek(self) -> Any:
        """Return the top item without removing it."""
        if not self._items:
            raise FiloEmptyError("filo is empty")
        return self._items[-1]

    def reset(self) -> None:
        """Discard all items."""
        self._items.clear()

    def free_space(self) -> int:
        """Number of free slots."""
        return self.max_size - len(self._items)

    def __len__(self) -> int:
        return len(self._items)