"""Small general helpers: random numbers, bit tricks, hex dumps and clocks."""

from __future__ import annotations

import random
import sys
import time
from typing import TextIO

__all__ = [
    "randint",
    "round_up_pow2",
    "format_hexdump",
    "hexdump",
    "usec_now",
    "usec_since",
    "millis_now",
    "millis_since",
]

_MASK32 = 0xFFFFFFFF


def randint(low: int, high: int) -> int:
    """Return a random integer between ``low`` and ``high``, both inclusive."""
    return random.randint(low, high)


def round_up_pow2(value: int) -> int:
    """Round a 32-bit value up to the nearest power of two.

    Powers of two are returned unchanged; zero and values above 2**31 wrap
    to zero as in 32-bit arithmetic.
    """
    v = (value - 1) & _MASK32
    for shift in (1, 2, 4, 8, 16):
        v |= v >> shift
    return (v + 1) & _MASK32


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def format_hexdump(data: bytes, header: str = "") -> str:
    """Render ``data`` as rows of 16 hex bytes followed by their ASCII form."""
    data = bytes(data)
    if not data:
        raise ValueError("cannot dump an empty buffer")
    rows = []
    for offset in range(0, len(data), 16):
        chunk = data[offset:offset + 16]
        parts = [f"    {offset:04d}  "]
        for index, byte in enumerate(chunk):
            if index == 8:
                parts.append(" ")
            parts.append(f"{byte:02x} ")
        if len(chunk) < 16:
            if len(chunk) <= 8:
                parts.append(" ")
            parts.append("   " * (16 - len(chunk)))
        text = "".join(map(_printable, chunk)).ljust(16)
        parts.append(f" |{text}|")
        rows.append("".join(parts))
    return f"{header} [{len(data)}] =>\n" + "\n".join(rows) + "\n"


def hexdump(data: bytes, header: str = "", file: TextIO | None = None) -> None:
    """Write the hex dump of ``data`` to ``file`` (standard output by default)."""
    print(format_hexdump(data, header), end="", file=file or sys.stdout)


def usec_now() -> int:
    """Wall-clock time in microseconds."""
    return time.time_ns() // 1000


def usec_since(last: int) -> int:
    """Microseconds elapsed since ``last`` (a value from usec_now)."""
    return usec_now() - last


def millis_now() -> int:
    """Wall-clock time in milliseconds."""
    return usec_now() // 1000


def millis_since(last: int) -> int:
    """Milliseconds elapsed since ``last`` (a value from millis_now)."""
    return millis_now() - last