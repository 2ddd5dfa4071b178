"""Union-find with path compression and union by rank."""

from __future__ import annotations

__all__ = ["DisjointSet", "DISJOINT_SET_MAX"]

DISJOINT_SET_MAX = 128


class DisjointSet:
    """Disjoint sets over the nodes ``0 .. max_nodes - 1``."""

    def __init__(self, max_nodes: int) -> None:
        if not 0 <= max_nodes < DISJOINT_SET_MAX:
            raise ValueError(
                f"max_nodes must be in [0, {DISJOINT_SET_MAX})"
            )
        self.max_nodes = max_nodes
        self._parent = list(range(max_nodes))
        self._rank = [0] * max_nodes

    def find(self, node: int) -> int:
        """Return the root of ``node``'s set, compressing the path to it."""
        root = node
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[node] != root:
            self._parent[node], node = root, self._parent[node]
        return root

    def union(self, a: int, b: int) -> None:
        """Merge the sets holding ``a`` and ``b``."""
        a = self.find(a)
        b = self.find(b)
        if a == b:
            return
        if self._rank[a] < self._rank[b]:
            a, b = b, a
        self._parent[b] = a
        if self._rank[a] == self._rank[b]:
            self._rank[a] += 1

    def num_roots(self) -> int:
        """Number of distinct sets."""
        return sum(1 for node, parent in enumerate(self._parent) if node == parent)