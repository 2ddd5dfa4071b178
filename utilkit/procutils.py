"""Process helpers: PID files, output redirection and /proc lookups."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Iterable

from utilkit.file import path_extract

__all__ = [
    "read_pid",
    "write_pid",
    "o_redirect",
    "parse_proc_cmdline",
    "pid_of",
    "any_pid_of",
]

_PROC = "/proc"
_CMDLINE_ARG_MAX = 200
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_STDOUT_FD = 1
_STDERR_FD = 2


def read_pid(path: str | os.PathLike[str] | None) -> int:
    """Read the PID stored in ``path`` (as written by :func:`write_pid`).

    Raises ValueError when no path is given or the file does not start with
    a number, and OSError when the file cannot be opened.
    """
    if path is None:
        raise ValueError("no PID file given")
    with open(path, encoding="ascii", errors="replace") as handle:
        text = handle.read()
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"failed to read PID from file {os.fspath(path)}")
    return int(match.group(1))


def write_pid(path: str | os.PathLike[str] | None) -> bool:
    """Write the calling process's PID to ``path``.

    Returns False without writing anything when ``path`` is None.
    """
    if path is None:
        return False
    with open(path, "w", encoding="ascii") as handle:
        handle.write(f"{os.getpid()}\n")
    return True


def _flush_std() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            pass


def o_redirect(mode: int, path: str | os.PathLike[str] | None) -> None:
    """Redirect standard output (bit 0 of ``mode``) and/or error (bit 1) to ``path``.

    The file is opened for appending and created if needed. With no path
    the selected descriptors are closed instead.
    """
    _flush_std()
    fd = None
    if path is not None:
        fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_APPEND, 0o644)
    try:
        for bit, target in ((0x01, _STDOUT_FD), (0x02, _STDERR_FD)):
            if not mode & bit:
                continue
            if fd is not None:
                os.dup2(fd, target)
            else:
                os.close(target)
    finally:
        if fd is not None:
            os.close(fd)


def parse_proc_cmdline(pid: int, pos: int = 1) -> str | None:
    """Return argument number ``pos`` (1-based) of process ``pid``.

    Arguments are cut to 200 characters. Returns None when the process
    cannot be read or the argument is missing or empty.
    """
    try:
        with open(f"{_PROC}/{pid}/cmdline", "rb") as handle:
            data = handle.read()
    except OSError:
        return None
    args = data.split(b"\0")
    index = max(pos - 1, 0)
    if index >= len(args):
        return None
    arg = args[index][:_CMDLINE_ARG_MAX]
    if not arg:
        return None
    return os.fsdecode(arg)


def _arg0_basename(arg0: str) -> str | None:
    try:
        _, base = path_extract(arg0)
    except (ValueError, OSError):
        return None
    return base


def pid_of(exe_name: str, omit: Iterable[int] | None = None) -> int | None:
    """Return the PID of a process whose executable's base name is ``exe_name``.

    PIDs in ``omit`` are skipped. The executable is taken from the first
    command line argument, resolved to a real path. Returns None when no
    such process is found.
    """
    omitted = frozenset(omit or ())
    try:
        entries = os.listdir(_PROC)
    except OSError:
        return None
    wanted = exe_name[:_CMDLINE_ARG_MAX]
    for name in entries:
        if not (name.isascii() and name.isdigit()):
            continue
        pid = int(name)
        if pid in omitted:
            continue
        arg0 = parse_proc_cmdline(pid, 1)
        if arg0 is None or arg0 == "/proc/self/exe":
            continue
        base = _arg0_basename(arg0)
        if base is not None and base[:_CMDLINE_ARG_MAX] == wanted:
            return pid
    return None


def any_pid_of(exe_name: str) -> int | None:
    """Return the PID of any process running ``exe_name``, or None."""
    return pid_of(exe_name)