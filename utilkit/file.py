"""File and path helpers."""

from __future__ import annotations

import os
from typing import IO, AnyStr

__all__ = [
    "read_all",
    "path_join",
    "get_working_directory",
    "is_regular_file",
    "path_extract",
]

_PATH_SEP = "/"
_FIRST_CHUNK = 2 * 1024


def read_all(stream: IO[AnyStr]) -> AnyStr:
    """Read ``stream`` to its end in exponentially growing chunks."""
    chunks = []
    chunk_size = _FIRST_CHUNK
    while True:
        chunk = stream.read(chunk_size)
        chunks.append(chunk)
        if len(chunk) < chunk_size:
            break
        chunk_size *= 2
    return chunks[0][:0].join(chunks)


def path_join(first: str | None, second: str | None) -> str | None:
    """Join two path parts; an absolute ``second`` replaces ``first``."""
    if second is None:
        return None
    if second.startswith(_PATH_SEP) or not first:
        return second
    if first.endswith(_PATH_SEP):
        return first + second
    return first + _PATH_SEP + second


def get_working_directory() -> str:
    """Return the current working directory."""
    return os.getcwd()


def is_regular_file(path: str | os.PathLike[str]) -> bool:
    """True when ``path`` names a regular file (following symlinks)."""
    return os.path.isfile(path)


def path_extract(path: str | os.PathLike[str]) -> tuple[str, str]:
    """Return the directory and base name of the resolved path of a regular file."""
    if not path or not is_regular_file(path):
        raise ValueError(f"not a regular file: {path!r}")
    real = os.path.realpath(path)
    return os.path.dirname(real), os.path.basename(real)