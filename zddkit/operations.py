"""Boolean (BDD) and set-family (ZBDD) operations on a shared node store.

Every operation that returns an edge hands the caller one new reference,
which is released with :meth:`NodeStore.free`.  ``None`` operands are
passed through as ``None``.
"""

from __future__ import annotations

from .nodes import (
    FALSE,
    TRUE,
    BDDError,
    NodeStore,
    Op,
    is_const,
    is_neg,
    negate,
    node_index,
    strip,
)

RECURSION_LIMIT = 8192

_BINARY = frozenset(
    {Op.AND, Op.XOR, Op.COFACTOR, Op.UNIV, Op.INTERSEC, Op.UNION, Op.SUBTRACT}
)
_UNARY = frozenset(
    {Op.AT0, Op.AT1, Op.LSHIFT, Op.RSHIFT, Op.SUPPORT, Op.OFFSET, Op.ONSET, Op.CHANGE}
)
_COUNTING = frozenset({Op.CARD, Op.LIT, Op.LEN})


class Manager(NodeStore):
    """Node store with the BDD and ZBDD operations built on it."""

    _depth = 0

    # ------------------------------------------------------------- helpers

    def _rfc_one(self, f: int) -> bool:
        return self._rfc[node_index(f)] == 1

    def _level(self, f: int) -> int:
        if is_const(f):
            return 0
        return self._lev[self._var[node_index(f)]]

    def _operand(self, f: int, name: str, zbdd: bool) -> None:
        if is_const(f):
            if strip(f) != FALSE:
                raise BDDError(f"{name}: Invalid bddp ({f:#x})")
            return
        if not self._valid_node(f):
            raise BDDError(f"{name}: Invalid bddp ({f:#x})")
        z = self._is_z(node_index(f))
        if zbdd and not z:
            raise BDDError(f"{name}: applying non-ZBDD node ({f:#x})")
        if not zbdd and z:
            raise BDDError(f"{name}: applying ZBDD node ({f:#x})")

    def _check_var(self, v: int, name: str) -> None:
        if v == 0 or v > self._var_used:
            raise BDDError(f"{name}: Invalid VarID ({v:#x})")

    def _node(self, z: bool, v: int, h0: int, h1: int) -> int:
        return self._getzbddp(v, h0, h1) if z else self._getbddp(v, h0, h1)

    def _children(self, first, second) -> tuple[int, int]:
        h0 = first()
        try:
            h1 = second()
        except BaseException:
            self._dec(h0)
            raise
        return h0, h1

    def _split(self, f: int) -> tuple[int, bool, int, int]:
        idx = node_index(f)
        z = self._is_z(idx)
        f0, f1 = self._f0[idx], self._f1[idx]
        if is_neg(f) ^ is_neg(f0):
            f0 = negate(f0)
        if is_neg(f) and not z:
            f1 = negate(f1)
        return self._var[idx], z, f0, f1

    # ------------------------------------------------------- core recursion

    def _terminal(self, f: int, g: int, op: Op):
        """Return ("done", result) or ("go", f, g) after the trivial cases."""
        if op == Op.AND:
            if f == FALSE or g == FALSE or f == negate(g):
                return ("done", FALSE)
            if f == g:
                self._inc(f)
                return ("done", f)
            if f == TRUE:
                self._inc(g)
                return ("done", g)
            if g == TRUE:
                self._inc(f)
                return ("done", f)
            if f < g:
                f, g = g, f
        elif op == Op.XOR:
            if f == g:
                return ("done", FALSE)
            if f == negate(g):
                return ("done", TRUE)
            if f == FALSE:
                self._inc(g)
                return ("done", g)
            if g == FALSE:
                self._inc(f)
                return ("done", f)
            if f == TRUE:
                self._inc(g)
                return ("done", negate(g))
            if g == TRUE:
                self._inc(f)
                return ("done", negate(f))
            if is_neg(f) and is_neg(g):
                f, g = negate(f), negate(g)
            elif is_neg(f) or is_neg(g):
                f, g = strip(f), strip(g)
                if f < g:
                    f, g = g, f
                return ("done", negate(self._apply(f, g, op, True)))
            if f < g:
                f, g = g, f
        elif op == Op.COFACTOR:
            if is_const(f):
                return ("done", f)
            if g == FALSE or f == negate(g):
                return ("done", FALSE)
            if f == g:
                return ("done", TRUE)
            if g == TRUE:
                self._inc(f)
                return ("done", f)
        elif op == Op.UNIV:
            if is_const(f):
                return ("done", f)
            if is_const(g):
                self._inc(f)
                return ("done", f)
            if is_neg(g):
                g = negate(g)
        elif op == Op.SUPPORT:
            if is_const(f):
                return ("done", FALSE)
            if is_neg(f):
                f = negate(f)
        elif op == Op.INTERSEC:
            if f == FALSE or g == FALSE:
                return ("done", FALSE)
            if f == TRUE:
                return ("done", TRUE if is_neg(g) else FALSE)
            if g == TRUE:
                return ("done", TRUE if is_neg(f) else FALSE)
            if f == g:
                self._inc(f)
                return ("done", f)
            if f == negate(g):
                self._inc(f)
                return ("done", strip(f))
            if f < g:
                f, g = g, f
        elif op == Op.UNION:
            if f == FALSE:
                self._inc(g)
                return ("done", g)
            if f == TRUE:
                self._inc(g)
                return ("done", g if is_neg(g) else negate(g))
            if g == FALSE or f == g:
                self._inc(f)
                return ("done", f)
            if g == TRUE or f == negate(g):
                self._inc(f)
                return ("done", f if is_neg(f) else negate(f))
            if f < g:
                f, g = g, f
        elif op == Op.SUBTRACT:
            if f == FALSE or f == g:
                return ("done", FALSE)
            if f == TRUE or f == negate(g):
                return ("done", FALSE if is_neg(g) else TRUE)
            if g == FALSE:
                self._inc(f)
                return ("done", f)
            if g == TRUE:
                self._inc(f)
                return ("done", strip(f))
        elif op in (Op.AT0, Op.AT1, Op.OFFSET):
            if is_const(f):
                return ("done", f)
            idx = node_index(f)
            flev = self._lev[self._var[idx]]
            glev = self._lev[g]
            if flev < glev:
                self._inc(f)
                return ("done", f)
            if flev == glev:
                if op != Op.AT1:
                    h = self._f0[idx]
                    if is_neg(f) ^ is_neg(h):
                        h = negate(h)
                else:
                    h = self._f1[idx]
                    if is_neg(f):
                        h = negate(h)
                self._inc(h)
                return ("done", h)
            if is_neg(f):
                return ("done", negate(self._apply(negate(f), g, op, True)))
        elif op == Op.ONSET:
            if is_const(f):
                return ("done", FALSE)
            idx = node_index(f)
            flev = self._lev[self._var[idx]]
            glev = self._lev[g]
            if flev < glev:
                return ("done", FALSE)
            if flev == glev:
                h = self._f1[idx]
                self._inc(h)
                return ("done", h)
            if is_neg(f):
                f = negate(f)
        elif op == Op.CHANGE:
            if f == FALSE:
                return ("done", f)
            if is_const(f):
                return ("done", self._getzbddp(g, FALSE, f))
            idx = node_index(f)
            flev = self._lev[self._var[idx]]
            glev = self._lev[g]
            if flev < glev:
                self._inc(f)
                return ("done", self._getzbddp(g, FALSE, f))
            if flev == glev:
                h0 = self._f1[idx]
                h1 = self._f0[idx]
                if is_neg(f) ^ is_neg(h1):
                    h1 = negate(h1)
                self._inc(h0)
                self._inc(h1)
                return ("done", self._getzbddp(g, h0, h1))
        elif op in (Op.LSHIFT, Op.RSHIFT):
            if is_const(f):
                return ("done", f)
            if is_neg(f):
                return ("done", negate(self._apply(negate(f), g, op, True)))
        elif op == Op.CARD:
            if is_const(f):
                return ("done", 0 if f == FALSE else 1)
            if is_neg(f):
                return ("done", self._apply(negate(f), FALSE, op, True) + 1)
        elif op in (Op.LIT, Op.LEN):
            if is_const(f):
                return ("done", 0)
            if is_neg(f):
                f = negate(f)
        else:
            raise BDDError(f"apply: unknown opcode ({int(op):#x})")
        return ("go", f, g)

    def _apply(self, f: int, g: int, op: Op, skip: bool = False):
        if not skip:
            outcome = self._terminal(f, g, op)
            if outcome[0] == "done":
                return outcome[1]
            f, g = outcome[1], outcome[2]

        if op in _BINARY:
            use_cache = not (
                (is_const(f) or self._rfc_one(f)) and (is_const(g) or self._rfc_one(g))
            )
            if use_cache:
                h = self._cache_lookup(op, f, g)
                if h is not None:
                    self._inc(h)
                    return h
            z = False
            flev, glev = self._level(f), self._level(g)
            f0 = f1 = f
            g0 = g1 = g
            v = 0
            if flev <= glev:
                gi = node_index(g)
                v = self._var[gi]
                if self._is_z(gi):
                    z = True
                    if flev < glev:
                        f1 = FALSE
                g0, g1 = self._f0[gi], self._f1[gi]
                if is_neg(g) ^ is_neg(g0):
                    g0 = negate(g0)
                if is_neg(g) and not z:
                    g1 = negate(g1)
            if flev >= glev:
                fi = node_index(f)
                v = self._var[fi]
                if self._is_z(fi):
                    z = True
                    if flev > glev:
                        g1 = FALSE
                f0, f1 = self._f0[fi], self._f1[fi]
                if is_neg(f) ^ is_neg(f0):
                    f0 = negate(f0)
                if is_neg(f) and not z:
                    f1 = negate(f1)
        elif op in _UNARY:
            use_cache = not self._rfc_one(f)
            if use_cache:
                h = self._cache_lookup(op, f, g)
                if h is not None:
                    self._inc(h)
                    return h
            v, z, f0, f1 = self._split(f)
        elif op in _COUNTING:
            g = FALSE
            use_cache = not self._rfc_one(f)
            if use_cache:
                h = self._cache_lookup(op, f, g)
                if h is not None:
                    return h
            idx = node_index(f)
            f0, f1 = self._f0[idx], self._f1[idx]
            if is_neg(f) ^ is_neg(f0):
                f0 = negate(f0)
        else:
            raise BDDError(f"apply: unknown opcode ({int(op):#x})")

        self._depth += 1
        try:
            if self._depth >= RECURSION_LIMIT:
                raise BDDError(f"BDD_RECUR_INC: Recursion Limit ({self._depth:#x})")
            h = self._compute(op, f, g, v if op not in _COUNTING else 0,
                              z if op not in _COUNTING else False,
                              f0, f1,
                              g0 if op in _BINARY else g,
                              g1 if op in _BINARY else g)
        finally:
            self._depth -= 1

        if use_cache:
            self._cache_store(op, f, g, h)
            if h == f:
                if op == Op.AT0:
                    self._cache_store(Op.AT1, f, g, h)
                elif op == Op.AT1:
                    self._cache_store(Op.AT0, f, g, h)
                elif op == Op.OFFSET:
                    self._cache_store(Op.ONSET, f, g, FALSE)
            if h == FALSE and op == Op.ONSET:
                self._cache_store(Op.OFFSET, f, g, f)
        return h

    def _compute(self, op, f, g, v, z, f0, f1, g0, g1):
        ap = self._apply
        if op in (Op.AND, Op.XOR, Op.INTERSEC, Op.UNION, Op.SUBTRACT):
            h0, h1 = self._children(lambda: ap(f0, g0, op), lambda: ap(f1, g1, op))
            return self._node(z, v, h0, h1)
        if op == Op.COFACTOR:
            if g0 == FALSE and g1 != FALSE:
                return ap(f1, g1, op)
            if g1 == FALSE and g0 != FALSE:
                return ap(f0, g0, op)
            h0, h1 = self._children(lambda: ap(f0, g0, op), lambda: ap(f1, g1, op))
            return self._getbddp(v, h0, h1)
        if op == Op.UNIV:
            h0, h1 = self._children(lambda: ap(f0, g0, op), lambda: ap(f1, g0, op))
            if g0 != g1:
                try:
                    return ap(h0, h1, Op.AND)
                finally:
                    self._dec(h0)
                    self._dec(h1)
            return self._getbddp(v, h0, h1)
        if op in (Op.AT0, Op.AT1, Op.OFFSET, Op.ONSET, Op.CHANGE):
            h0, h1 = self._children(lambda: ap(f0, g, op), lambda: ap(f1, g, op))
            return self._node(z, v, h0, h1)
        if op == Op.SUPPORT:
            h0, h1 = self._children(
                lambda: ap(f0, FALSE, op), lambda: ap(f1, FALSE, op)
            )
            try:
                if z:
                    h = ap(h0, h1, Op.UNION)
                else:
                    h = ap(negate(h0), negate(h1), Op.AND)
            finally:
                self._dec(h0)
                self._dec(h1)
            if z:
                return self._getzbddp(v, h, TRUE)
            return self._getbddp(v, negate(h), TRUE)
        if op in (Op.LSHIFT, Op.RSHIFT):
            flev = self.lev_of_var(v)
            if op == Op.LSHIFT:
                newlev = flev + g
                if newlev > self._var_used or newlev < flev:
                    raise BDDError(f"apply: Invald shift ({newlev:#x})")
            else:
                newlev = flev - g
                if newlev <= 0 or newlev > flev:
                    raise BDDError(f"apply: Invald shift ({newlev:#x})")
            nv = self.var_of_lev(newlev)
            h0, h1 = self._children(lambda: ap(f0, g, op), lambda: ap(f1, g, op))
            return self._node(z, nv, h0, h1)
        if op == Op.CARD:
            return ap(f0, FALSE, op) + ap(f1, FALSE, op)
        if op == Op.LIT:
            return ap(f0, FALSE, op) + ap(f1, FALSE, op) + ap(f1, FALSE, Op.CARD)
        if op == Op.LEN:
            return max(ap(f0, FALSE, op), ap(f1, FALSE, op) + 1)
        raise BDDError(f"apply: unknown opcode ({int(op):#x})")

    def _and_nonfalse(self, f: int, g: int) -> bool:
        """True when ``f & g`` is satisfiable; builds no nodes."""
        if f == FALSE or g == FALSE or f == negate(g):
            return False
        if f == TRUE or g == TRUE or f == g:
            return True
        if f > g:
            f, g = g, f
        use_cache = not (
            (is_const(f) or self._rfc_one(f)) and (is_const(g) or self._rfc_one(g))
        )
        if use_cache:
            h = self._cache_lookup(Op.AND, f, g)
            if h is not None:
                return h != FALSE
        flev, glev = self._level(f), self._level(g)
        f0 = f1 = f
        g0 = g1 = g
        if flev <= glev:
            gi = node_index(g)
            g0, g1 = self._f0[gi], self._f1[gi]
            if is_neg(g):
                g0, g1 = negate(g0), negate(g1)
        if flev >= glev:
            fi = node_index(f)
            f0, f1 = self._f0[fi], self._f1[fi]
            if is_neg(f):
                f0, f1 = negate(f0), negate(f1)
        if self._and_nonfalse(f0, g0) or self._and_nonfalse(f1, g1):
            return True
        if use_cache:
            self._cache_store(Op.AND, f, g, FALSE)
        return False

    # ----------------------------------------------------------- BDD API

    def prime(self, v: int) -> int:
        """BDD of the single variable ``v``."""
        self._check_var(v, "bddprime")
        return self._getbddp(v, FALSE, TRUE)

    def not_(self, f: int | None) -> int | None:
        if f is None:
            return None
        return negate(self.copy(f))

    def _bdd_binary(self, f, g, op: Op, name: str):
        if f is None or g is None:
            return None
        self._operand(f, name, zbdd=False)
        self._operand(g, name, zbdd=False)
        return self._apply(f, g, op)

    def and_(self, f: int | None, g: int | None) -> int | None:
        return self._bdd_binary(f, g, Op.AND, "bddand")

    def or_(self, f: int | None, g: int | None) -> int | None:
        if f is None or g is None:
            return None
        return negate(self.and_(negate(f), negate(g)))

    def xor(self, f: int | None, g: int | None) -> int | None:
        return self._bdd_binary(f, g, Op.XOR, "bddxor")

    def nand(self, f: int | None, g: int | None) -> int | None:
        h = self.and_(f, g)
        return None if h is None else negate(h)

    def nor(self, f: int | None, g: int | None) -> int | None:
        if f is None or g is None:
            return None
        return self.and_(negate(f), negate(g))

    def xnor(self, f: int | None, g: int | None) -> int | None:
        if g is None:
            return None
        return self.xor(f, negate(g))

    def cofactor(self, f: int | None, g: int | None) -> int | None:
        """Generalised cofactor of ``f`` by ``g``."""
        return self._bdd_binary(f, g, Op.COFACTOR, "bddcofactor")

    def univ(self, f: int | None, g: int | None) -> int | None:
        """Universal quantification of ``f`` over the variables in ``g``."""
        return self._bdd_binary(f, g, Op.UNIV, "bdduniv")

    def exist(self, f: int | None, g: int | None) -> int | None:
        """Existential quantification of ``f`` over the variables in ``g``."""
        if f is None or g is None:
            return None
        return negate(self.univ(negate(f), g))

    def imply(self, f: int | None, g: int | None) -> bool:
        """True when ``f`` implies ``g``."""
        if f is None or g is None:
            return False
        self._operand(f, "bddimply", zbdd=False)
        self._operand(g, "bddimply", zbdd=False)
        return not self._and_nonfalse(f, negate(g))

    def support(self, f: int | None) -> int | None:
        """Disjunction (or family) of the variables ``f`` depends on."""
        if f is None:
            return None
        if is_const(f):
            return FALSE
        self._check(f, "bddsupport")
        return self._apply(f, FALSE, Op.SUPPORT)

    def _restrict(self, f, v, op: Op, name: str):
        self._check_var(v, name)
        if f is None:
            return None
        if is_const(f):
            return f
        self._check(f, name)
        return self._apply(f, v, op)

    def at0(self, f: int | None, v: int) -> int | None:
        return self._restrict(f, v, Op.AT0, "bddat0")

    def at1(self, f: int | None, v: int) -> int | None:
        return self._restrict(f, v, Op.AT1, "bddat1")

    def _shift(self, f, shift: int, op: Op, name: str):
        if shift < 0 or shift >= self._var_used:
            raise BDDError(f"{name}: Invalid shift ({shift:#x})")
        if f is None:
            return None
        if is_const(f):
            return f
        if shift == 0:
            return self.copy(f)
        self._check(f, name)
        return self._apply(f, shift, op)

    def lshift(self, f: int | None, shift: int) -> int | None:
        return self._shift(f, shift, Op.LSHIFT, "bddlshift")

    def rshift(self, f: int | None, shift: int) -> int | None:
        return self._shift(f, shift, Op.RSHIFT, "bddrshift")

    # ---------------------------------------------------------- ZBDD API

    def _zbdd_node(self, f: int, name: str) -> None:
        self._check(f, name)
        if not self._is_z(node_index(f)):
            raise BDDError(f"{name}: applying non-ZBDD node ({f:#x})")

    def offset(self, f: int | None, v: int) -> int | None:
        """Sets of ``f`` that do not contain ``v``."""
        self._check_var(v, "bddoffset")
        if f is None:
            return None
        if is_const(f):
            return f
        self._zbdd_node(f, "bddoffset")
        return self._apply(f, v, Op.OFFSET)

    def onset0(self, f: int | None, v: int) -> int | None:
        """Sets of ``f`` containing ``v``, with ``v`` removed."""
        self._check_var(v, "bddonset0")
        if f is None:
            return None
        if is_const(f):
            return FALSE
        self._zbdd_node(f, "bddonset0")
        return self._apply(f, v, Op.ONSET)

    def onset(self, f: int | None, v: int) -> int | None:
        """Sets of ``f`` that contain ``v``."""
        g = self.onset0(f, v)
        h = self.change(g, v)
        self.free(g)
        return h

    def change(self, f: int | None, v: int) -> int | None:
        """Toggle membership of ``v`` in every set of ``f``."""
        self._check_var(v, "bddchange")
        if f is None:
            return None
        if not is_const(f):
            self._zbdd_node(f, "bddchange")
        return self._apply(f, v, Op.CHANGE)

    def push(self, f: int | None, v: int) -> int | None:
        """ZBDD node with variable ``v``, empty 0-branch and ``f`` as 1-branch."""
        self._check_var(v, "bddpush")
        if f is None:
            return None
        self._inc(f)
        return self._getzbddp(v, FALSE, f)

    def _zbdd_binary(self, f, g, op: Op, name: str):
        if f is None or g is None:
            return None
        self._operand(f, name, zbdd=True)
        self._operand(g, name, zbdd=True)
        return self._apply(f, g, op)

    def intersec(self, f: int | None, g: int | None) -> int | None:
        return self._zbdd_binary(f, g, Op.INTERSEC, "bddintersec")

    def union(self, f: int | None, g: int | None) -> int | None:
        return self._zbdd_binary(f, g, Op.UNION, "bddunion")

    def subtract(self, f: int | None, g: int | None) -> int | None:
        return self._zbdd_binary(f, g, Op.SUBTRACT, "bddsubtract")

    def _count(self, f, op: Op, name: str, const_value) -> int:
        if f is None:
            return 0
        if is_const(f):
            return const_value(f)
        self._zbdd_node(f, name)
        return self._apply(f, FALSE, op)

    def card(self, f: int | None) -> int:
        """Number of sets in the family ``f``."""
        return self._count(f, Op.CARD, "bddcard", lambda c: 0 if c == FALSE else 1)

    def lit(self, f: int | None) -> int:
        """Total number of literals over all sets of ``f``."""
        return self._count(f, Op.LIT, "bddlit", lambda c: 0)

    def length(self, f: int | None) -> int:
        """Size of the largest set in ``f``."""
        return self._count(f, Op.LEN, "bddlen", lambda c: 0)

    def card_mp16(self, f: int | None) -> str:
        """Number of sets in ``f`` as an upper-case hexadecimal string."""
        count = self._count(
            f, Op.CARD, "bddcardmp16", lambda c: 1 if c == TRUE else 0
        )
        return format(count, "X")