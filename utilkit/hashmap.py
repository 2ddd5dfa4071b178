"""String-keyed hash map with separate chaining and the djb2 hash."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from utilkit.strutils import hash32_djb2
from utilkit.utils import round_up_pow2

__all__ = ["HashMap"]

_BASE_SIZE = 32
_DENSITY_FACTOR = 0.8


@dataclass
class _Entry:
    hash: int
    key: str
    value: Any


class HashMap:
    """A map from strings to values.

    The bucket table starts at 32 slots and doubles whenever the load
    factor exceeds 0.8 at the time of an insert. Iteration walks the
    buckets in order and yields ``(key, value)`` pairs.
    """

    def __init__(self) -> None:
        self._capacity = round_up_pow2(_BASE_SIZE)
        self._pool: list[list[_Entry]] = [[] for _ in range(self._capacity)]
        self._count = 0

    @property
    def capacity(self) -> int:
        """Current number of buckets."""
        return self._capacity

    def _slot(self, hash_value: int) -> int:
        return hash_value & (self._capacity - 1)

    def _rehash(self) -> None:
        old_capacity = self._capacity
        self._capacity <<= 1
        self._pool.extend([] for _ in range(old_capacity))
        for pivot in range(old_capacity):
            stay: list[_Entry] = []
            for entry in self._pool[pivot]:
                target = self._slot(entry.hash)
                if target == pivot:
                    stay.append(entry)
                else:
                    self._pool[target].insert(0, entry)
            self._pool[pivot] = stay

    def _find(self, key: str) -> tuple[list[_Entry], int]:
        hash_value = hash32_djb2(key)
        bucket = self._pool[self._slot(hash_value)]
        for index, entry in enumerate(bucket):
            if entry.hash == hash_value and entry.key == key:
                return bucket, index
        raise KeyError(key)

    def insert(self, key: str, value: Any) -> int:
        """Insert or update ``key``; returns the key's hash."""
        if self._count / self._capacity > _DENSITY_FACTOR:
            self._rehash()
        hash_value = hash32_djb2(key)
        bucket = self._pool[self._slot(hash_value)]
        for entry in bucket:
            if entry.hash == hash_value and entry.key == key:
                entry.value = value
                return hash_value
        bucket.append(_Entry(hash_value, key, value))
        self._count += 1
        return hash_value

    def get(self, key: str) -> Any:
        """Return the value stored under ``key``; raises KeyError if absent."""
        bucket, index = self._find(key)
        return bucket[index].value

    def delete(self, key: str) -> Any:
        """Remove ``key`` and return its value; raises KeyError if absent."""
        bucket, index = self._find(key)
        entry = bucket.pop(index)
        self._count -= 1
        return entry.value

    def clear(self, callback: Callable[[str, Any], None] | None = None) -> None:
        """Remove every entry, calling ``callback(key, value)`` on each first."""
        if callback is not None:
            for key, value in self:
                callback(key, value)
        self._capacity = round_up_pow2(_BASE_SIZE)
        self._pool = [[] for _ in range(self._capacity)]
        self._count = 0

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        pairs = [(entry.key, entry.value) for bucket in self._pool for entry in bucket]
        return iter(pairs)

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            self._find(key)
        except KeyError:
            return False
        return True