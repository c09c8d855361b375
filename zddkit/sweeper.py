"""On-the-fly removal of nodes equivalent to the 0-terminal."""

from __future__ import annotations

from dataclasses import dataclass

from .messages import MessageHandler
from .nodetable import ZERO, NodeId, NodeTable


@dataclass
class NodeBranchId:
    """A branch of a node, identified by the node's row and column."""

    row: int
    col: int
    val: int = 0


class DdSweeper:
    """Sweeps dead nodes from a diagram while it is built top-down.

    After a sweep, :attr:`root` holds the renumbered root id.
    """

    SWEEP_RATIO = 20

    def __init__(
        self,
        diagram: NodeTable,
        one_sources: list[NodeBranchId] | None = None,
    ) -> None:
        self._diagram = diagram
        self._one_sources = one_sources
        self._sweep_level: list[int] = []
        self._dead_count: list[int] = []
        self._all_count = 0
        self._max_count = 0
        self.root: NodeId | None = None

    def set_root(self, root: NodeId) -> None:
        self.root = root

    def update(self, current: int, child: int, count: int) -> None:
        """Record ``count`` dead nodes at ``current`` and sweep if worthwhile.

        ``child`` is the level at which edges from ``current`` are completed.
        """
        if current < 1:
            raise ValueError("current level must be at least one")
        if child < 0:
            raise ValueError("child level must be non-negative")
        if current <= 1:
            return

        if current >= len(self._sweep_level):
            self._sweep_level.extend([0] * (current + 1 - len(self._sweep_level)))
            self._dead_count.extend([0] * (current + 2 - len(self._dead_count)))

        for i in range(child, current + 1):
            if self._sweep_level[i] > 0:
                break
            self._sweep_level[i] = current + 1

        diagram = self._diagram
        self._dead_count[current] = count
        self._all_count += len(diagram[current])

        k = self._sweep_level[current - 1]
        for i in range(self._sweep_level[current], k, -1):
            self._dead_count[k] += self._dead_count[i]
            self._dead_count[i] = 0
        self._max_count = max(self._max_count, self._all_count)
        if self._dead_count[k] * self.SWEEP_RATIO < self._max_count:
            return
        if self.root is None:
            raise RuntimeError("root is not set")

        mh = MessageHandler()
        mh.begin("sweeping")
        mh.write(f" <{diagram.size()}> ...")

        new_id: list[list[NodeId]] = [[] for _ in range(diagram.num_rows())]
        for i in range(k, diagram.num_rows()):
            row = diagram[i]
            ids = [ZERO] * len(row)
            new_id[i] = ids
            kept: list[list[NodeId]] = []
            for j, node in enumerate(row):
                dead = True
                for b, f in enumerate(node):
                    if f.row >= k:
                        f = new_id[f.row][f.col]
                        node[b] = f
                    if f != ZERO:
                        dead = False
                if not dead:
                    ids[j] = NodeId(i, len(kept))
                    kept.append(node)
            row[:] = kept

        if self._one_sources is not None:
            for nbi in self._one_sources:
                if nbi.row >= k:
                    f = new_id[nbi.row][nbi.col]
                    nbi.row = f.row
                    nbi.col = f.col

        if self.root.row >= k:
            self.root = new_id[self.root.row][self.root.col]
        self._dead_count[k] = 0
        self._all_count = diagram.size()
        mh.end_with_size(diagram.size())