"""Fixed-size block allocator over a pool of equal slabs."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["SlabError", "SlabBlock", "Slab"]

_WORD = 8
_HEADER = 8
_CANARY = 0xDEADBEAF


class SlabError(Exception):
    """Raised when a slab cannot be set up, allocated or released."""


def _round_up(value: int, step: int) -> int:
    return (value + step - 1) & ~(step - 1)


@dataclass(eq=False)
class SlabBlock:
    """A block leased from a :class:`Slab`."""

    slab: Slab
    index: int
    data: bytearray = field(repr=False)


class Slab:
    """A pool carved from ``blob_size`` bytes into blocks of at least ``slab_size`` bytes.

    Each block costs its size rounded up to a word plus an eight-byte header.
    """

    def __init__(self, slab_size: int, blob_size: int) -> None:
        block_size = _round_up(slab_size, _WORD)
        self.size = block_size + _HEADER
        if self.size > blob_size:
            raise SlabError("blob is too small for a single slab")
        self.count = blob_size // self.size
        self._data = [bytearray(block_size) for _ in range(self.count)]
        self._leased = [False] * self.count
        self._canary = [0] * self.count

    def alloc(self) -> SlabBlock:
        """Lease the first free block; raises SlabError when none is left."""
        for index, leased in enumerate(self._leased):
            if not leased:
                self._leased[index] = True
                self._canary[index] = _CANARY
                return SlabBlock(self, index, self._data[index])
        raise SlabError("no free slab")

    def free(self, block: SlabBlock) -> None:
        """Release ``block``; raises SlabError if it was not issued by this slab."""
        if (
            not isinstance(block, SlabBlock)
            or block.slab is not self
            or not 0 <= block.index < self.count
            or self._canary[block.index] != _CANARY
        ):
            raise SlabError("block does not belong to this slab")
        self._leased[block.index] = False