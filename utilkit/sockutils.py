"""Unix domain stream socket helpers."""

from __future__ import annotations

import os
import socket

__all__ = ["unix_socket_listen", "unix_socket_connect"]


def unix_socket_listen(path: str | os.PathLike[str], max_clients: int) -> socket.socket:
    """Bind a listening Unix stream socket at ``path``.

    Any existing file at ``path`` is removed first. Raises OSError on failure.
    """
    address = os.fspath(path)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        try:
            os.unlink(address)
        except FileNotFoundError:
            pass
        sock.bind(address)
        sock.listen(max_clients)
    except BaseException:
        sock.close()
        raise
    return sock


def unix_socket_connect(path: str | os.PathLike[str]) -> socket.socket:
    """Connect a Unix stream socket to ``path``; raises OSError on failure."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(os.fspath(path))
    except BaseException:
        sock.close()
        raise
    return sock