"""Evaluators that turn a top-down diagram into BDDs or ZBDDs of a manager.

Nodes at level ``i`` become nodes at level ``i + offset`` of the manager;
missing variables are created by :meth:`initialize`.  ``values`` passed to
``eval_node`` is a sequence of ``(edge, level)`` pairs indexed by branch.
Each result is a new reference owned by the caller.
"""

from __future__ import annotations

from collections.abc import Sequence

from .nodes import FALSE, TRUE, negate
from .operations import Manager


def _ensure_vars(manager: Manager, needed: int) -> None:
    while manager.var_used() < needed:
        manager.new_var()


class ToBDD:
    """Builds the BDD of a top-down diagram."""

    def __init__(self, manager: Manager, offset: int = 0) -> None:
        self.manager = manager
        self.offset = offset

    def initialize(self, top_level: int) -> None:
        _ensure_vars(self.manager, top_level + self.offset)

    def eval_terminal(self, value: int) -> int:
        return TRUE if value else FALSE

    def eval_node(self, level: int, values: Sequence[tuple[int, int]]) -> int:
        lev = level + self.offset
        if lev <= 0:
            raise ValueError("level + offset must be positive")
        m = self.manager
        f0, f1 = values[0][0], values[1][0]
        x = m.prime(m.var_of_lev(lev))
        try:
            low = m.and_(f0, negate(x))
            try:
                high = m.and_(f1, x)
                try:
                    return m.or_(low, high)
                finally:
                    m.free(high)
            finally:
                m.free(low)
        finally:
            m.free(x)


class ToZBDD:
    """Builds the ZBDD of a top-down diagram."""

    def __init__(self, manager: Manager, offset: int = 0) -> None:
        self.manager = manager
        self.offset = offset

    def initialize(self, top_level: int) -> None:
        _ensure_vars(self.manager, top_level + self.offset)

    def eval_terminal(self, value: int) -> int:
        return TRUE if value else FALSE

    def eval_node(self, level: int, values: Sequence[tuple[int, int]]) -> int:
        m = self.manager
        f0 = values[0][0]
        lev = level + self.offset
        if lev <= 0:
            return m.copy(f0)
        changed = m.change(values[1][0], m.var_of_lev(lev))
        try:
            return m.union(f0, changed)
        finally:
            m.free(changed)