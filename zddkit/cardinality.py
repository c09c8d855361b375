"""Evaluators that count the elements represented by a decision diagram.

An evaluator is driven bottom-up: :meth:`initialize` receives the level of
the root, :meth:`eval_terminal` gives the value of a terminal and
:meth:`eval_node` combines the values of a node's children.  ``values`` is
a sequence indexed by branch of ``(value, level)`` pairs, where ``level``
is the level of that child (0 for a terminal).  Counts are exact integers.
"""

from __future__ import annotations

from collections.abc import Sequence


def _terminal_count(one: bool | int) -> int:
    """Count for a terminal: 1 for the 1-terminal, 0 for the 0-terminal."""
    value = int(one)
    if value < 0:
        raise ValueError(f"invalid terminal value: {value}")
    return 1 if value else 0


def _check_count(n: int) -> int:
    """Return ``n`` as an exact integer count, rejecting negative values."""
    count = int(n)
    if count < 0:
        raise ValueError(f"count cannot be negative: {count}")
    return count


class BddCardinality:
    """Counts the assignments accepted by a BDD over ``num_vars`` variables.

    Levels skipped by an edge are free variables, each multiplying the
    count by the arity.
    """

    def __init__(self, num_vars: int = 0, arity: int = 2) -> None:
        if arity < 1:
            raise ValueError("arity must be at least one")
        self.num_vars = num_vars
        self.arity = arity
        self.top_level = 0

    def initialize(self, level: int) -> None:
        """Record the level of the root."""
        self.top_level = level

    def eval_terminal(self, one: bool | int) -> int:
        """Count for a terminal node."""
        return _terminal_count(one)

    def eval_node(self, level: int, values: Sequence[tuple[int, int]]) -> int:
        total = 0
        for value, child_level in values[: self.arity]:
            skipped = max(level - child_level - 1, 0)
            total += value * self.arity**skipped
        return total

    def get_value(self, n: int) -> int:
        """Final count, accounting for the free levels above the root."""
        skipped = max(self.num_vars - self.top_level, 0)
        return _check_count(n) * self.arity**skipped


class ZddCardinality:
    """Counts the sets represented by a ZDD."""

    def __init__(self, arity: int = 2) -> None:
        if arity < 1:
            raise ValueError("arity must be at least one")
        self.arity = arity
        self.top_level = 0

    def initialize(self, level: int) -> None:
        """Record the level of the root."""
        self.top_level = level

    def eval_terminal(self, one: bool | int) -> int:
        """Count for a terminal node."""
        return _terminal_count(one)

    def eval_node(self, level: int, values: Sequence[tuple[int, int]]) -> int:
        return sum(value for value, _ in values[: self.arity])

    def get_value(self, n: int) -> int:
        """Final count; skipped levels do not change a ZDD's count."""
        return _check_count(n)