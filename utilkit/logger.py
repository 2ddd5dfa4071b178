"""A small levelled logger writing coloured, prefixed lines."""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Any, TextIO

__all__ = ["LogLevel", "LoggerFlag", "Logger", "LOG_BUF_LEN"]

LOG_BUF_LEN = 128

_RED = "\x1b[31m"
_GRN = "\x1b[32m"
_YEL = "\x1b[33m"
_MAG = "\x1b[35m"
_RESET = "\x1b[0m"


class LogLevel(enum.IntEnum):
    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


class LoggerFlag(enum.IntFlag):
    NONE = 0
    NO_COLORS = 0x1
    HAS_PREFIX = 0x2
    PREFIX_ALLOC = 0x4


_COLORS = (_RED, _RED, _RED, _RED, _YEL, _MAG, _GRN, _RESET)
_NAMES = ("EMERG", "ALERT", "CRIT ", "ERROR", "WARN ", "NOTIC", "INFO ", "DEBUG")


class Logger:
    """Writes log lines to ``file`` or, when no file is set, through ``puts``."""

    def __init__(
        self,
        module: str,
        log_level: int = LogLevel.INFO,
        flags: LoggerFlag = LoggerFlag.NONE,
        file: TextIO | None = None,
        puts: Callable[[str], Any] | None = None,
    ) -> None:
        self.module = module
        self.log_level = log_level
        self.flags = LoggerFlag(flags)
        self.file = file
        self.puts = puts
        self.prefix: str | None = None

    def set_prefix(self, fmt: str, *args: Any) -> None:
        """Set a prefix printed after the level name on every line."""
        self.prefix = fmt % args if args else fmt
        self.flags |= LoggerFlag.HAS_PREFIX | LoggerFlag.PREFIX_ALLOC

    def clear_prefix(self) -> None:
        """Remove the prefix."""
        self.prefix = None
        self.flags &= ~(LoggerFlag.HAS_PREFIX | LoggerFlag.PREFIX_ALLOC)

    def _set_color(self, color: str) -> None:
        if self.flags & LoggerFlag.NO_COLORS or self.file is None:
            return
        isatty = getattr(self.file, "isatty", None)
        if isatty is not None and isatty():
            self.file.write(color)

    def log(self, level: int, tag: str, fmt: str, *args: Any) -> int:
        """Write one line at ``level``; returns its length, or 0 when filtered out."""
        if self.file is None and self.puts is None:
            raise RuntimeError("logger has neither a file nor a puts function")
        if level < LogLevel.EMERG or level > LogLevel.DEBUG or level > self.log_level:
            return 0
        line = f"{self.module}: {tag}: {_NAMES[level]}: "
        if self.flags & LoggerFlag.HAS_PREFIX:
            line += f"{self.prefix}: "
        line += fmt % args if args else fmt
        line = line[: LOG_BUF_LEN - 1]
        if not line.endswith("\n"):
            line += "\n"

        self._set_color(_COLORS[level])
        if self.file is not None:
            self.file.write(line)
        else:
            self.puts(line)
        self._set_color(_RESET)
        return len(line)