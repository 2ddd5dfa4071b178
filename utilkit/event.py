"""A pipe-backed event flag that can be waited on or polled."""

from __future__ import annotations

import os
import struct
from typing import Any

from utilkit.fdutils import fcntl_setfl, flush_fd, write_loop

__all__ = ["Event"]

_SIGNAL = struct.pack("=Q", 1)


class Event:
    """An event flag built on a pipe.

    :meth:`set` writes a token to the pipe; :meth:`is_set` drains it and
    reports whether anything was there. A blocking event makes
    :meth:`is_set` wait until the event is set.
    """

    def __init__(self, active: bool = False, blocking: bool = True) -> None:
        rfd, wfd = os.pipe()
        try:
            if not blocking:
                fcntl_setfl(rfd, os.O_NONBLOCK)
                fcntl_setfl(wfd, os.O_NONBLOCK)
        except OSError:
            os.close(rfd)
            os.close(wfd)
            raise
        self._rfd = rfd
        self._wfd = wfd
        self._initialized = True
        if active:
            self.set()

    @property
    def closed(self) -> bool:
        return not self._initialized

    def set(self) -> bool:
        """Signal the event; returns False if the event is closed or the write fails."""
        if not self._initialized:
            return False
        try:
            write_loop(self._wfd, _SIGNAL)
        except OSError:
            return False
        return True

    def is_set(self) -> bool:
        """Consume any pending signals; True when at least one was pending."""
        if not self._initialized:
            return False
        return flush_fd(self._rfd)

    def close(self) -> None:
        """Release the pipe; further calls do nothing."""
        if not self._initialized:
            return
        os.close(self._rfd)
        os.close(self._wfd)
        self._rfd = self._wfd = -1
        self._initialized = False

    def __enter__(self) -> Event:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()