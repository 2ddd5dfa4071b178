"""Fixed-capacity strings with copy, append and formatted-print modes.

Modes accepted by :meth:`BoundedString.copy` and :meth:`BoundedString.printf`:

- ``"c"``: copy to the start of the string and fail when it does not fit.
- ``"cf"``: copy to the start and keep as much as fits.
- ``"a"``: append to the current contents and fail when it does not fit.
- ``"af"``: append and keep as much as fits.
"""

from __future__ import annotations

from typing import Any

__all__ = ["StringOverflowError", "BoundedString"]

_MODES = frozenset({"a", "af", "c", "cf"})


class StringOverflowError(ValueError):
    """Raised when text does not fit into a bounded string."""


def _check_mode(mode: str) -> None:
    if mode not in _MODES:
        raise ValueError(f"invalid string mode {mode!r}")


class BoundedString:
    """A string that holds at most ``max_len`` characters."""

    def __init__(
        self, max_len: int, value: str | None = None, resizable: bool = False
    ) -> None:
        if max_len < 0:
            raise ValueError("max_len must not be negative")
        value = value or ""
        if len(value) > max_len:
            raise StringOverflowError("initial value is longer than max_len")
        self._max_len = max_len
        self._value = value
        self.resizable = resizable

    @property
    def max_len(self) -> int:
        """Capacity in characters."""
        return self._max_len

    @property
    def value(self) -> str:
        """Current contents."""
        return self._value

    def _start(self, mode: str) -> int:
        return len(self._value) if mode.startswith("a") else 0

    def printf(self, mode: str, fmt: str, *args: Any) -> int:
        """Format ``fmt % args`` into the string; returns the characters written.

        The result, together with any kept contents, must stay strictly
        shorter than ``max_len``; otherwise StringOverflowError is raised and
        the string is left unchanged.
        """
        _check_mode(mode)
        start = self._start(mode)
        text = fmt % args if args else fmt
        if start + len(text) >= self._max_len:
            raise StringOverflowError("formatted text does not fit")
        self._value = self._value[:start] + text
        return len(text)

    def copy(self, mode: str, text: str) -> int:
        """Copy ``text`` into the string; returns the characters copied."""
        _check_mode(mode)
        start = self._start(mode)
        if start + len(text) > self._max_len:
            if not mode.endswith("f"):
                raise StringOverflowError("text does not fit")
            text = text[: self._max_len - start]
        self._value = self._value[:start] + text
        return len(text)

    def resize(self, new_len: int) -> None:
        """Change the capacity, truncating the contents if they no longer fit."""
        if not self.resizable:
            raise StringOverflowError("string is not resizable")
        if new_len < 0:
            raise ValueError("new_len must not be negative")
        self._max_len = new_len
        self._value = self._value[:new_len]

    def merge(self, other: BoundedString) -> None:
        """Append ``other`` to this string, growing it if needed, and empty ``other``."""
        target = len(self._value) + len(other)
        if target > self._max_len:
            self.resize(target)
        self.copy("a", other.value)
        other._value = ""
        other._max_len = 0

    def clone(self) -> BoundedString:
        """Return a resizable copy whose capacity equals the current length."""
        return BoundedString(len(self._value), self._value, resizable=True)

    def flush(self) -> None:
        """Empty the string, keeping its capacity."""
        self._value = ""

    def __str__(self) -> str:
        return self._value

    def __len__(self) -> int:
        return len(self._value)

    def __repr__(self) -> str:
        return f"BoundedString({self._max_len}, {self._value!r})"