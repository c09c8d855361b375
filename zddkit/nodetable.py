"""Level-by-level node tables for top-down decision diagrams.

Row 0 of a table holds the two terminals; row ``i`` holds the nodes at
level ``i``.  A node is a list of child :class:`NodeId` values, one for
each branch.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

MAX_REFERENCES = (1 << 32) - 1


@dataclass(frozen=True, eq=False)
class NodeId:
    """Position of a node: its level (row), its column and an attribute bit."""

    row: int
    col: int = 0
    attr: bool = False

    def __post_init__(self) -> None:
        if self.row < 0 or self.col < 0:
            raise ValueError("row and column must be non-negative")

    @property
    def is_terminal(self) -> bool:
        return self.row == 0

    @property
    def has_empty(self) -> bool:
        """True if the sub-diagram contains the empty set."""
        return (self.row == 0 and self.col == 1) or self.attr

    def with_attr(self, flag: bool = True) -> NodeId:
        return NodeId(self.row, self.col, flag)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NodeId):
            return (self.row, self.col, self.attr) == (other.row, other.col, other.attr)
        if isinstance(other, int) and not isinstance(other, bool):
            return not self.attr and self.row == 0 and self.col == other
        return NotImplemented

    def __hash__(self) -> int:
        if self.row == 0 and not self.attr:
            return hash(self.col)
        return hash((self.row, self.col, self.attr))

    def __str__(self) -> str:
        text = f"{self.row}:{self.col}"
        return text + "+" if self.attr else text


ZERO = NodeId(0, 0)
ONE = NodeId(0, 1)


def _shift(ff: NodeId, d: int) -> NodeId:
    if ff.row == 0:
        return ff
    if ff.row + d <= 0:
        return ONE
    return NodeId(ff.row + d, ff.col)


class NodeTable:
    """Rows of nodes indexed by level, with the terminals in row 0."""

    def __init__(self, rows: int = 1, arity: int = 2) -> None:
        if arity < 1:
            raise ValueError("arity must be at least one")
        self.arity = arity
        self._rows: list[list[list[NodeId]]] = []
        self._higher: list[list[int]] | None = None
        self._lower: list[list[int]] | None = None
        self.init(rows)

    def init(self, rows: int) -> None:
        """Clear the table and give it ``rows`` rows."""
        if rows < 1:
            raise ValueError("a node table needs at least one row")
        self._rows = [[] for _ in range(rows)]
        self._rows[0][:] = [[ZERO] * self.arity, [ONE] * self.arity]
        self.delete_index()

    def _clone(self) -> NodeTable:
        table = NodeTable(1, self.arity)
        table._rows = [[list(node) for node in row] for row in self._rows]
        return table

    def __getitem__(self, level: int) -> list[list[NodeId]]:
        return self._rows[level]

    def num_rows(self) -> int:
        return len(self._rows)

    def size(self) -> int:
        """Number of non-terminal nodes."""
        return sum(len(row) for row in self._rows) - len(self._rows[0])

    def num_vars(self) -> int:
        return len(self._rows) - 1

    def add_node(self, level: int, branches: Iterable[NodeId]) -> NodeId:
        """Append a node at ``level`` and return its id."""
        node = list(branches)
        if len(node) != self.arity:
            raise ValueError(f"a node needs exactly {self.arity} branches")
        if not 1 <= level < len(self._rows):
            raise ValueError(f"invalid level {level}")
        row = self._rows[level]
        row.append(node)
        return NodeId(level, len(row) - 1)

    def _set_num_rows(self, n: int) -> None:
        if n > len(self._rows):
            self._rows.extend([] for _ in range(n - len(self._rows)))
        else:
            del self._rows[n:]

    def stretch_bottom(self, n: int) -> None:
        """Change the number of variables by moving existing levels up or down."""
        if n < 0:
            raise ValueError("number of variables must be non-negative")
        n0 = self.num_vars()
        d = n - n0
        if d > 0:
            self._set_num_rows(n + 1)
            for i in range(n0, 0, -1):
                self._rows[i + d] = [
                    [_shift(ff, d) for ff in node] for node in self._rows[i]
                ]
                self._rows[i] = []
        elif d < 0:
            for i in range(1 - d, n0 + 1):
                self._rows[i + d] = [
                    [_shift(ff, d) for ff in node] for node in self._rows[i]
                ]
                self._rows[i] = []
            self._set_num_rows(n + 1)
        self.delete_index()

    def node(self, f: NodeId) -> list[NodeId]:
        return self._rows[f.row][f.col]

    def _check_branch(self, b: int) -> None:
        if not 0 <= b < self.arity:
            raise ValueError(f"invalid branch {b}")

    def child(self, f: NodeId, b: int) -> NodeId:
        """The ``b``-child of ``f``."""
        self._check_branch(b)
        return self.node(f)[b]

    def set_child(self, f: NodeId, b: int, g: NodeId) -> None:
        self._check_branch(b)
        self.node(f)[b] = g

    def zero_descendant(self, f: NodeId, stop_level: int) -> NodeId:
        """Follow 0-edges from ``f`` down to ``stop_level`` or below."""
        if stop_level < 0:
            raise ValueError("stop level must be non-negative")
        if stop_level == 0 and f.has_empty:
            return ONE
        while f.row > stop_level:
            f = self.child(f, 0)
        return f

    def delete_index(self) -> None:
        self._higher = None
        self._lower = None

    def make_index(self) -> None:
        """Build the tables behind :meth:`higher_levels` and :meth:`lower_levels`."""
        n = len(self._rows) - 1
        higher: list[list[int]] = [[] for _ in range(n + 1)]
        lower: list[list[int]] = [[] for _ in range(n + 1)]
        lower_mark = [False] * (n + 1)

        for i in range(n, 0, -1):
            lowest = i
            my_lower = [False] * (n + 1)
            for node in self._rows[i]:
                for ff in node:
                    ii = ff.row
                    if ii == 0:
                        continue
                    lowest = min(lowest, ii)
                    if not lower_mark[ii]:
                        my_lower[ii] = True
                        lower_mark[ii] = True
            higher[lowest].append(i)
            lower[i] = [ii for ii in range(lowest, i) if my_lower[ii]]

        self._higher = higher
        self._lower = lower

    def higher_levels(self, level: int) -> list[int]:
        """Higher levels whose lowest direct reference is ``level``."""
        if self._higher is None:
            self.make_index()
        return self._higher[level]

    def lower_levels(self, level: int) -> list[int]:
        """Lower levels first referred to directly by ``level``."""
        if self._lower is None:
            self.make_index()
        return self._lower[level]

    def dump_dot(self, stream: TextIO, title: str = "") -> None:
        """Write the table in Graphviz dot format."""
        nrows = len(self._rows)
        out = [f'digraph "{title}" {{\n']
        out.extend(f"  {i} [shape=none];\n" for i in range(nrows - 1, 0, -1))
        out.extend(
            f"  {i + 1} -> {i} [style=invis];\n" for i in range(nrows - 2, 0, -1)
        )
        if title:
            out.append('  labelloc="t";\n')
            out.append(f'  label="{title}";\n')

        terminal1 = False
        for i in range(nrows - 1, 0, -1):
            row = self._rows[i]
            for j, node in enumerate(row):
                f = NodeId(i, j)
                out.append(f'  "{f}";\n')
                for b, ff in enumerate(node):
                    aa = ff.attr
                    if ff == ZERO:
                        continue
                    if ff == ONE:
                        terminal1 = True
                        edge = f'  "{f}" -> "$"'
                    else:
                        edge = f'  "{f}" -> "{ff.with_attr(False)}"'
                    if b == 0:
                        style = "dashed"
                    else:
                        style = "solid"
                        if self.arity > 2:
                            color = {1: "blue", 2: "red"}.get(b, "green")
                            style += f",color={color}"
                    if aa:
                        style += ",arrowtail=dot"
                    out.append(f"{edge} [style={style}];\n")
            if terminal1:
                out.append('  "$" [shape=square,label="⊤"];\n')
            ranks = "".join(f'; "{NodeId(i, j)}"' for j in range(len(row)))
            out.append(f"  {{rank=same; {i}{ranks}}}\n")

        out.append("}\n")
        stream.write("".join(out))
        stream.flush()


class _SharedTable:
    __slots__ = ("ref_count", "entity")

    def __init__(self, entity: NodeTable) -> None:
        self.ref_count = 1
        self.entity = entity


class NodeTableHandler:
    """Copy-on-write handle to a node table shared between diagrams."""

    def __init__(self, rows: int = 1, arity: int = 2) -> None:
        self._shared = _SharedTable(NodeTable(rows, arity))

    @property
    def ref_count(self) -> int:
        """Number of handles sharing the table."""
        return self._shared.ref_count

    def share(self) -> NodeTableHandler:
        """Another handle to the same table."""
        if self._shared.ref_count >= MAX_REFERENCES:
            raise RuntimeError("Too many references")
        other = object.__new__(type(self))
        self._shared.ref_count += 1
        other._shared = self._shared
        return other

    def release(self) -> None:
        """Give up this handle's share of the table."""
        self._shared.ref_count -= 1

    def entity(self) -> NodeTable:
        """The table, for reading."""
        return self._shared.entity

    def private_entity(self) -> NodeTable:
        """The table, copied first if it is shared, for writing."""
        if self._shared.ref_count >= 2:
            self._shared.ref_count -= 1
            self._shared = _SharedTable(self._shared.entity._clone())
        return self._shared.entity

    def init(self, rows: int = 1) -> NodeTable:
        """Clear the table, detaching from other handles if shared."""
        if self._shared.ref_count == 1:
            self._shared.entity.init(rows)
        else:
            arity = self._shared.entity.arity
            self._shared.ref_count -= 1
            self._shared = _SharedTable(NodeTable(rows, arity))
        return self._shared.entity

    def deref_level(self, i: int) -> None:
        """Clear row ``i`` unless the table is shared."""
        if self._shared.ref_count == 1:
            self._shared.entity[i].clear()