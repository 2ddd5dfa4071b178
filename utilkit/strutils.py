"""String helpers: hex conversion, tokenising, trimming and string hashes."""

from __future__ import annotations

import re
import string
from collections.abc import Iterator

__all__ = [
    "atohstr",
    "hstrtoa",
    "safe_atoi",
    "trim_suffix",
    "remove_all",
    "split_string",
    "strcntchr",
    "strisempty",
    "hash32_djb2",
    "hash32_fnv",
    "poly_hash",
    "str_sep",
    "str_sep_count",
    "to_upper",
    "to_lower",
]

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_C_SPACE = " \t\n\v\f\r"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

_POLY_BASE = 31
_POLY_MOD = 1_000_000_009


def atohstr(data: bytes) -> str:
    """Return the upper-case hexadecimal representation of ``data``."""
    return bytes(data).hex().upper()


def hstrtoa(hstr: str) -> bytes:
    """Decode a hexadecimal string into bytes.

    Raises ValueError for an empty string, an odd number of characters or
    any character that is not a hex digit.
    """
    if not hstr or len(hstr) % 2:
        raise ValueError("hex string must have a non-zero, even length")
    if any(ch not in _HEX_DIGITS for ch in hstr):
        raise ValueError(f"invalid hex string {hstr!r}")
    return bytes.fromhex(hstr)


def safe_atoi(text: str | None) -> int:
    """Parse a leading integer the way ``atoi`` does, rejecting non-numbers.

    A result of zero is only accepted when the text itself starts with '0',
    so that "0" and "A" can be told apart.
    """
    if text is None:
        raise ValueError("no text to convert")
    match = _ATOI.match(text)
    value = int(match.group(1)) if match else 0
    if value == 0 and not text.startswith("0"):
        raise ValueError(f"not a number: {text!r}")
    return value


def trim_suffix(text: str, suffix: str) -> str:
    """Drop the trailing characters of ``text`` that match the end of ``suffix``.

    Matching runs backwards from the end of both strings and stops at the
    first mismatch, so a partially matching suffix is trimmed partially.
    Raises ValueError when the suffix is longer than the text.
    """
    if len(suffix) > len(text):
        raise ValueError("suffix is longer than the text")
    i, j = len(text), len(suffix)
    while j > 0 and text[i - 1] == suffix[j - 1]:
        i -= 1
        j -= 1
    return text[:i]


def _check_char(char: str) -> None:
    if len(char) != 1:
        raise ValueError("expected a single character")


def remove_all(text: str, char: str) -> str:
    """Return ``text`` with every occurrence of ``char`` removed."""
    _check_char(char)
    return text.replace(char, "")


def _tokens(text: str, sep: str) -> Iterator[str]:
    token: list[str] = []
    for ch in text:
        if ch in sep:
            if token:
                yield "".join(token)
                token = []
        else:
            token.append(ch)
    if token:
        yield "".join(token)


def split_string(text: str, sep: str) -> list[str]:
    """Split ``text`` on any of the characters in ``sep``, dropping empty tokens.

    Raises ValueError when no token is found.
    """
    tokens = list(_tokens(text, sep))
    if not tokens:
        raise ValueError("no tokens found")
    return tokens


def strcntchr(text: str, char: str) -> int:
    """Count the occurrences of ``char`` in ``text``."""
    _check_char(char)
    return text.count(char)


def strisempty(text: str | None) -> bool:
    """True when ``text`` is None, empty or only whitespace."""
    return text is None or not text.strip(_C_SPACE)


def _raw(text: str | bytes, length: int) -> bytes:
    data = text.encode() if isinstance(text, str) else bytes(text)
    data = data.split(b"\0", 1)[0]
    if length >= 0:
        data = data[:length]
    return data


def _signed(byte: int) -> int:
    return byte - 256 if byte > 127 else byte


def hash32_djb2(text: str | bytes, length: int = -1) -> int:
    """32-bit djb2 hash of ``text`` (up to ``length`` bytes; negative means all)."""
    value = 5381
    for byte in _raw(text, length):
        value = (value * 33 + _signed(byte)) & _MASK32
    return value


def hash32_fnv(text: str | bytes, length: int = -1) -> int:
    """32-bit FNV-1 style hash of ``text`` starting from a zero basis."""
    value = 0
    for byte in _raw(text, length):
        value = (value * 0x01000193) & _MASK32
        value ^= byte
    return value


def poly_hash(text: str | bytes, length: int = -1) -> int:
    """Polynomial rolling hash (base 31, modulus 1e9+9) of ``text``."""
    value = 0
    power = 1
    for byte in _raw(text, length):
        term = ((_signed(byte) - ord("a") + 1) * power) & _MASK64
        value = ((value + term) & _MASK64) % _POLY_MOD
        power = (power * _POLY_BASE) % _POLY_MOD
    return value


def str_sep(text: str | None, sep: str) -> tuple[str | None, str | None]:
    """Take the next token off ``text``.

    Leading separators are skipped, the token runs up to the next
    separator, and that one separator is consumed. Returns ``(token, rest)``.
    None or an empty string is returned unchanged as both token and rest.
    """
    if not text:
        return text, text
    size = len(text)
    start = 0
    while start < size and text[start] in sep:
        start += 1
    end = start
    while end < size and text[end] not in sep:
        end += 1
    rest = text[end + 1:] if end < size else ""
    return text[start:end], rest


def str_sep_count(text: str | None, sep: str | None) -> int:
    """Count the tokens ``text`` splits into on the characters of ``sep``."""
    if not text:
        return 0
    if sep is None:
        return 1
    return sum(1 for _ in _tokens(text, sep))


def to_upper(text: str) -> str:
    """Upper-case the ASCII letters of ``text``, leaving other characters."""
    return text.translate(_UPPER)


def to_lower(text: str) -> str:
    """Lower-case the ASCII letters of ``text``, leaving other characters."""
    return text.translate(_LOWER)