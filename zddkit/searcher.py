"""Random depth-first search for one instance accepted by a DD spec.

A spec provides ``get_root()`` returning ``(state, level)`` and
``get_child(state, level, value)`` returning ``(state, level)``.  A level
of 0 means rejection, a negative level acceptance.  ``get_child`` receives
its own copy of the state and may change it.  The spec's arity is read
from its ``arity`` attribute (2 if absent); an optional
``destruct_level(i)`` method is called for every level after the search.
"""

from __future__ import annotations

import copy
import random
from typing import Any


class NoInstanceError(RuntimeError):
    """Raised when the spec accepts no instance at all."""


class DepthFirstSearcher:
    """Finds one accepted instance; the choice is random but not uniform."""

    def __init__(self, spec: Any, rng: random.Random | None = None) -> None:
        self.spec = spec
        self.arity = getattr(spec, "arity", 2)
        if self.arity < 1:
            raise ValueError("arity must be at least one")
        self.rng = rng if rng is not None else random.Random()

    def find_one_instance(self) -> list[tuple[int, int]]:
        """Return the (level, value) choices of one instance, lowest level first."""
        state, n = self.spec.get_root()
        if n <= 0:
            if n == 0:
                raise NoInstanceError("No instance")
            return []
        try:
            result = self._search(state, n)
        finally:
            destruct_level = getattr(self.spec, "destruct_level", None)
            if destruct_level is not None:
                for i in range(n, 0, -1):
                    destruct_level(i)
        if result is None:
            raise NoInstanceError("No instance")
        return result

    def _search(self, state: Any, level: int) -> list[tuple[int, int]] | None:
        arity = self.arity
        # Each frame: [state, level, first branch, branches tried]
        frames: list[list[Any]] = [[state, level, self.rng.randrange(arity), 0]]
        while frames:
            frame = frames[-1]
            st, lv, b0, tried = frame
            if tried == arity:
                frames.pop()
                if frames:
                    frames[-1][3] += 1
                continue
            b = (b0 + tried) % arity
            child_state, ii = self.spec.get_child(copy.deepcopy(st), lv, b)
            if ii <= 0:
                if ii != 0:
                    return [
                        (f[1], (f[2] + f[3]) % arity) for f in reversed(frames)
                    ]
                frame[3] += 1
                continue
            if ii >= lv:
                raise ValueError(f"child level {ii} is not below level {lv}")
            frames.append([child_state, ii, self.rng.randrange(arity), 0])
        return None