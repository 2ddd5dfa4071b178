"""Helpers for raw file descriptors that tolerate non-blocking I/O."""

from __future__ import annotations

import fcntl
import os

__all__ = ["fcntl_setfl", "read_loop", "write_loop", "flush_fd"]

_FLUSH_CHUNK = 64


def fcntl_setfl(fd: int, flag: int) -> None:
    """Add ``flag`` to the file status flags of ``fd``."""
    flags = fcntl.fcntl(fd, fcntl.F_GETFL)
    fcntl.fcntl(fd, fcntl.F_SETFL, flags | flag)


def read_loop(fd: int, max_len: int) -> bytes:
    """Read up to ``max_len`` bytes; returns b"" when nothing is available."""
    try:
        return os.read(fd, max_len)
    except BlockingIOError:
        return b""


def write_loop(fd: int, data: bytes) -> int:
    """Write ``data``; returns the bytes written, or 0 when the write would block."""
    try:
        return os.write(fd, data)
    except BlockingIOError:
        return 0


def flush_fd(fd: int) -> bool:
    """Drain pending input from ``fd``; True when any data was discarded."""
    drained = False
    while True:
        try:
            chunk = os.read(fd, _FLUSH_CHUNK)
        except OSError:
            break
        drained |= len(chunk) > 0
        if len(chunk) != _FLUSH_CHUNK:
            break
    return drained