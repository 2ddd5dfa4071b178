"""Fixed-capacity circular (ring) buffer."""

from __future__ import annotations

import threading
from typing import Any

__all__ = ["BufferFullError", "BufferEmptyError", "CircularBuffer"]


class BufferFullError(Exception):
    """Raised when pushing into a buffer that has no free slot."""


class BufferEmptyError(IndexError):
    """Raised when popping or peeking an empty buffer."""


class CircularBuffer:
    """A FIFO ring of ``size`` slots.

    Read and write counters run modulo twice the size, which lets a full
    buffer be told apart from an empty one. Operations are guarded by a
    lock so one producer and one consumer may run on different threads.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._size = size
        self._slots: list[Any] = [None] * size
        self._push_count = 0
        self._pop_count = 0
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        return self._size

    def _used(self) -> int:
        total = self._push_count - self._pop_count
        if total < 0:
            total += 2 * self._size
        return total

    def push(self, item: Any) -> None:
        """Append ``item`` at the head; raises BufferFullError when full."""
        with self._lock:
            if self._used() >= self._size:
                raise BufferFullError("circular buffer is full")
            self._slots[self._push_count % self._size] = item
            self._push_count = (self._push_count + 1) % (2 * self._size)

    def _take(self, remove: bool) -> Any:
        with self._lock:
            if self._used() == 0:
                raise BufferEmptyError("circular buffer is empty")
            index = self._pop_count % self._size
            item = self._slots[index]
            if remove:
                self._slots[index] = None
                self._pop_count = (self._pop_count + 1) % (2 * self._size)
            return item

    def pop(self) -> Any:
        """Remove and return the oldest item; raises BufferEmptyError when empty."""
        return self._take(remove=True)

    def peek(self) -> Any:
        """Return the oldest item without removing it."""
        return self._take(remove=False)

    def flush(self) -> None:
        """Discard all items."""
        with self._lock:
            self._push_count = 0
            self._pop_count = 0
            self._slots = [None] * self._size

    def free_space(self) -> int:
        """Number of free slots."""
        with self._lock:
            return self._size - self._used()

    def __len__(self) -> int:
        with self._lock:
            return self._used()