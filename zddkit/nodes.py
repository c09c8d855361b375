"""Shared node store for BDDs and ZBDDs: nodes, variables, references, cache.

Edges are integers.  A node edge is ``index << 1`` with the lowest bit
marking a negated (complement) edge.  Constant edges carry ``CONST_MASK``;
``FALSE`` and ``TRUE`` are the two terminals.  ``None`` stands for a
missing result and is passed through by most operations.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

CONST_MASK = 1 << 39
VAL_MASK = CONST_MASK - 1
INV_MASK = 1
FALSE = CONST_MASK
TRUE = CONST_MASK | INV_MASK

NODE_MAX = VAL_MASK >> 1
NODE_SPC0 = 256
VAR_MAX = 65535
USER_OP_MIN = 20


class Op(IntEnum):
    """Operation codes used as keys in the operation cache."""

    AND = 1
    XOR = 2
    AT0 = 3
    AT1 = 4
    LSHIFT = 5
    RSHIFT = 6
    COFACTOR = 7
    UNIV = 8
    SUPPORT = 9
    INTERSEC = 10
    UNION = 11
    SUBTRACT = 12
    OFFSET = 13
    ONSET = 14
    CHANGE = 15
    CARD = 16
    LIT = 17
    LEN = 18
    CARD2 = 19


_CHECK_FGH = {Op.AND, Op.XOR, Op.INTERSEC, Op.UNION, Op.SUBTRACT, Op.CHANGE}
_CHECK_FH = {Op.AT0, Op.AT1, Op.OFFSET, Op.ONSET}
_CHECK_F = {Op.CARD, Op.LIT, Op.LEN}


class BDDError(RuntimeError):
    """Raised on misuse of the node store, such as an invalid edge."""


def is_const(f: int) -> bool:
    """True for terminal (constant) edges."""
    return bool(f & CONST_MASK)


def is_neg(f: int) -> bool:
    """True for complemented edges."""
    return bool(f & INV_MASK)


def negate(f: int) -> int:
    """Toggle the complement bit of an edge."""
    return f ^ INV_MASK


def strip(f: int) -> int:
    """Edge with its complement bit cleared."""
    return f & ~INV_MASK


def const_value(f: int) -> int:
    """Value bits of an edge."""
    return f & VAL_MASK


def node_index(f: int) -> int:
    """Index of the node an edge points to."""
    return strip(f) >> 1


def _cache_size_for(capacity: int) -> int:
    size = NODE_SPC0
    while size < capacity >> 1:
        size <<= 1
    return size


class NodeStore:
    """Table of shared, reference-counted decision-diagram nodes."""

    def __init__(self, init_size: int = NODE_SPC0, limit_size: int = NODE_MAX) -> None:
        self._limit = min(max(limit_size, NODE_SPC0), NODE_MAX)
        self._capacity = min(max(init_size, NODE_SPC0), self._limit)
        cap = self._capacity
        self._f0: list[int] = [0] * cap
        self._f1: list[int] = [0] * cap
        self._var: list[int] = [0] * cap
        self._rfc: list[int] = [0] * cap
        self._free: list[int] = list(range(cap - 1, -1, -1))
        self._used = 0
        self._unique: list[dict[tuple[int, int], int]] = [{}]
        self._lev: list[int] = [0]
        self._var_id: list[int] = [0]
        self._var_used = 0
        self._cache_capacity = _cache_size_for(cap)
        self._cache: dict[int, tuple[int, int, int, object]] = {}

    # ------------------------------------------------------------ variables

    def new_var(self) -> int:
        """Create a variable at the top level and return its id."""
        if self._var_used >= VAR_MAX:
            raise BDDError("var_enlarge: var index range full")
        self._var_used += 1
        v = self._var_used
        self._lev.append(v)
        self._var_id.append(v)
        self._unique.append({})
        return v

    def new_var_of_lev(self, lev: int) -> int:
        """Create a variable inserted at level ``lev``; return its id."""
        if lev == 0 or lev > self._var_used + 1:
            raise BDDError(f"bddnewvaroflev: Invalid level ({lev:#x})")
        v = self.new_var()
        for i in range(self._var_used, lev, -1):
            moved = self._var_id[i - 1]
            self._var_id[i] = moved
            self._lev[moved] = i
        self._var_id[lev] = v
        self._lev[v] = lev
        return v

    def lev_of_var(self, v: int) -> int:
        """Level of variable ``v``."""
        if v < 0 or v > self._var_used:
            raise BDDError(f"bddlevofvar: Invalid VarID ({v:#x})")
        return self._lev[v]

    def var_of_lev(self, lev: int) -> int:
        """Variable at level ``lev``."""
        if lev < 0 or lev > self._var_used:
            raise BDDError(f"bddvaroflev: Invalid level ({lev:#x})")
        return self._var_id[lev]

    def var_used(self) -> int:
        """Number of variables created so far."""
        return self._var_used

    # ----------------------------------------------------------- references

    def _valid_node(self, f: int) -> bool:
        idx = node_index(f)
        return idx < len(self._var) and self._var[idx] != 0

    def _check(self, f: int, name: str) -> None:
        if not is_const(f) and not self._valid_node(f):
            raise BDDError(f"{name}: Invalid bddp ({f:#x})")

    def _inc(self, f: int) -> None:
        if not is_const(f):
            self._rfc[node_index(f)] += 1

    def _dec(self, f: int) -> None:
        if is_const(f):
            return
        idx = node_index(f)
        if self._rfc[idx] == 0:
            raise BDDError(f"B_RFC_DEC_NP: rfc under flow ({idx:#x})")
        self._rfc[idx] -= 1

    def copy(self, f: int | None) -> int | None:
        """Take one more reference to ``f`` and return it."""
        if f is None or is_const(f):
            return f
        self._check(f, "bddcopy")
        self._inc(f)
        return f

    def free(self, f: int | None) -> None:
        """Release one reference to ``f``."""
        if f is None or is_const(f):
            return
        self._check(f, "bddfree")
        self._dec(f)

    # ---------------------------------------------------------------- nodes

    def _is_z(self, idx: int) -> bool:
        return is_neg(self._f0[idx])

    def _enlarge(self) -> None:
        old = self._capacity
        new = min(old << 1, self._limit)
        extra = new - old
        self._f0.extend([0] * extra)
        self._f1.extend([0] * extra)
        self._var.extend([0] * extra)
        self._rfc.extend([0] * extra)
        self._free = self._free + list(range(new - 1, old - 1, -1))
        self._capacity = new
        self._cache_capacity = _cache_size_for(new)

    def _getnode(self, v: int, f0: int, f1: int) -> int:
        """Find or create the node (v, f0, f1), consuming the child references."""
        table = self._unique[v]
        key = (f0, f1)
        idx = table.get(key)
        if idx is not None:
            self._dec(f0)
            self._dec(f1)
            self._rfc[idx] += 1
            return idx << 1
        if self._used >= self._capacity - 1:
            if self._capacity < self._limit:
                self._enlarge()
            elif self.gc() == 0:
                self._dec(f0)
                self._dec(f1)
                raise MemoryError("BDD node table is full")
        self._used += 1
        idx = self._free.pop()
        self._f0[idx] = f0
        self._f1[idx] = f1
        self._var[idx] = v
        self._rfc[idx] = 1
        table[key] = idx
        return idx << 1

    def _getbddp(self, v: int, f0: int, f1: int) -> int:
        """BDD node with the elimination and complement-edge rules applied."""
        if f0 == f1:
            self._dec(f0)
            return f0
        if is_neg(f0):
            return negate(self._getnode(v, negate(f0), negate(f1)))
        return self._getnode(v, f0, f1)

    def _getzbddp(self, v: int, f0: int, f1: int) -> int:
        """ZBDD node with the zero-suppression and complement-edge rules applied."""
        if f1 == FALSE:
            return f0
        if is_neg(f0):
            return negate(self._getnode(v, f0, f1))
        return self._getnode(v, negate(f0), f1)

    def _release_node(self, idx: int) -> tuple[int, int]:
        f0, f1 = self._f0[idx], self._f1[idx]
        del self._unique[self._var[idx]][(f0, f1)]
        self._free.append(idx)
        self._used -= 1
        self._var[idx] = 0
        self._rfc[idx] = 0
        return f0, f1

    def _collect(self, idx: int) -> None:
        f0, f1 = self._release_node(idx)
        pending = [f1, f0]
        while pending:
            e = pending.pop()
            if is_const(e):
                continue
            self._dec(e)
            j = node_index(e)
            if self._rfc[j] == 0:
                g0, g1 = self._release_node(j)
                pending.extend((g1, g0))

    def _alive(self, f: object) -> bool:
        if not isinstance(f, int) or is_const(f):
            return True
        idx = node_index(f)
        return idx >= len(self._var) or self._var[idx] != 0

    def _keep_entry(self, entry: tuple[int, int, int, object]) -> bool:
        op, f, g, h = entry
        if op in _CHECK_FGH:
            return self._alive(f) and self._alive(g) and self._alive(h)
        if op in _CHECK_FH:
            return self._alive(f) and self._alive(h)
        if op in _CHECK_F:
            return self._alive(f)
        return False

    def gc(self) -> int:
        """Reclaim unreferenced nodes; return how many were freed."""
        before = self._used
        garbage = [
            idx for idx, (v, r) in enumerate(zip(self._var, self._rfc)) if v and r == 0
        ]
        for idx in garbage:
            if self._var[idx] and self._rfc[idx] == 0:
                self._collect(idx)
        freed = before - self._used
        if freed == 0:
            return 0
        self._cache = {
            slot: entry for slot, entry in self._cache.items() if self._keep_entry(entry)
        }
        return freed

    def used(self) -> int:
        """Number of nodes currently allocated."""
        return self._used

    def _reachable(self, roots: Iterable[int]) -> int:
        seen: set[int] = set()
        stack = [f for f in roots if not is_const(f)]
        while stack:
            f = stack.pop()
            idx = node_index(f)
            if idx in seen:
                continue
            seen.add(idx)
            for child in (self._f0[idx], self._f1[idx]):
                if not is_const(child):
                    stack.append(child)
        return len(seen)

    def size(self, f: int | None) -> int:
        """Number of distinct nodes reachable from ``f``."""
        if f is None or is_const(f):
            return 0
        self._check(f, "bddsize")
        return self._reachable([f])

    def vsize(self, roots: Iterable[int | None]) -> int:
        """Number of distinct nodes shared by ``roots``, up to the first None."""
        chosen: list[int] = []
        for f in roots:
            if f is None:
                break
            self._check(f, "bddvsize")
            chosen.append(f)
        return self._reachable(chosen)

    def top(self, f: int | None) -> int:
        """Variable of the root node of ``f``; 0 for constants and None."""
        if f is None or is_const(f):
            return 0
        self._check(f, "bddtop")
        return self._var[node_index(f)]

    def is_bdd(self, f: int | None) -> bool:
        """True if ``f`` is a constant or a BDD node."""
        if f is None:
            return False
        if is_const(f):
            return True
        self._check(f, "bddisbdd")
        return not self._is_z(node_index(f))

    def is_zbdd(self, f: int | None) -> bool:
        """True if ``f`` is a constant or a ZBDD node."""
        if f is None:
            return False
        if is_const(f):
            return True
        self._check(f, "bddiszbdd")
        return self._is_z(node_index(f))

    # ---------------------------------------------------------------- cache

    def _slot(self, op: int, f: int, g: int) -> int:
        return hash((op, f, g)) & (self._cache_capacity - 1)

    def _cache_lookup(self, op: int, f: int, g: int) -> object:
        entry = self._cache.get(self._slot(op, f, g))
        if entry is not None and entry[0] == op and entry[1] == f and entry[2] == g:
            return entry[3]
        return None

    def _cache_store(self, op: int, f: int, g: int, h: object) -> None:
        self._cache[self._slot(op, f, g)] = (op, f, g, h)

    def read_cache(self, op: int, f: int, g: int) -> object:
        """Cached result of ``op`` on ``(f, g)``, or None on a miss."""
        return self._cache_lookup(op, f, g)

    def write_cache(self, op: int, f: int, g: int, h: object) -> None:
        """Cache a result for a user operation code (20 or above)."""
        if op < USER_OP_MIN:
            raise BDDError(f"bddwcache: op < 20 ({op:#x})")
        if h is None:
            return
        self._cache_store(op, f, g, h)