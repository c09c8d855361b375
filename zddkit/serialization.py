"""Text export, import and debugging dumps of BDD and ZBDD graphs.

The export format is a whitespace-separated token stream::

    _i <number of levels>
    _o <number of roots>
    _n <number of nodes>
    <node> <level> <0-edge> <1-edge>     (one line per node, children first)
    <root>                               (one line per root)

Edges are written as ``F`` or ``T`` for the terminals and as decimal edge
numbers otherwise; an odd number denotes a complemented edge.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from .nodes import (
    FALSE,
    TRUE,
    BDDError,
    const_value,
    is_const,
    is_neg,
    node_index,
    strip,
)
from .operations import Manager


def _roots_until_none(manager: Manager, roots: Iterable[int | None], name: str) -> list[int]:
    chosen: list[int] = []
    for f in roots:
        if f is None:
            break
        manager._check(f, name)
        chosen.append(f)
    return chosen


def _postorder(manager: Manager, roots: Iterable[int], seen: set[int]) -> Iterator[int]:
    """Node indexes below ``roots``, each after both of its children."""
    for root in roots:
        stack: list[tuple[int, bool]] = [(root, False)]
        while stack:
            edge, expanded = stack.pop()
            if is_const(edge):
                continue
            idx = node_index(edge)
            if expanded:
                yield idx
                continue
            if idx in seen:
                continue
            seen.add(idx)
            stack.append((edge, True))
            stack.append((manager._f1[idx], False))
            stack.append((strip(manager._f0[idx]), False))


def _edge_token(f: int) -> str:
    if f == FALSE:
        return "F"
    if f == TRUE:
        return "T"
    return str(f)


def export(manager: Manager, stream: TextIO, roots: Iterable[int | None]) -> None:
    """Write the graphs of ``roots`` (up to the first None) to ``stream``."""
    chosen = _roots_until_none(manager, roots, "bddvexport")
    lev = 0
    for f in chosen:
        lev = max(lev, manager.lev_of_var(manager.top(f)))

    lines = [f"_i {lev}\n_o {len(chosen)}\n_n {manager.vsize(chosen)}\n"]
    for idx in _postorder(manager, chosen, set()):
        f0 = strip(manager._f0[idx])
        f1 = manager._f1[idx]
        level = manager._lev[manager._var[idx]]
        lines.append(f"{idx << 1} {level} {_edge_token(f0)} {_edge_token(f1)}\n")
    lines.extend(f"{_edge_token(f)}\n" for f in chosen)
    stream.write("".join(lines))


def _next_token(tokens: Iterator[str]) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ValueError("unexpected end of input") from None


def _expect(tokens: Iterator[str], keyword: str) -> int:
    token = _next_token(tokens)
    if token != keyword:
        raise ValueError(f"expected {keyword!r}, found {token!r}")
    return int(_next_token(tokens))


def _import(manager: Manager, stream: TextIO, limit: int | None, zbdd: bool) -> list[int]:
    tokens = iter(stream.read().split())

    levels = _expect(tokens, "_i")
    while levels > manager.var_used():
        manager.new_var()
    num_roots = _expect(tokens, "_o")
    num_nodes = _expect(tokens, "_n")

    built: dict[int, int] = {}
    roots: list[int] = []

    def lookup(nd: int) -> int:
        try:
            return built[nd]
        except KeyError:
            raise BDDError(f"bddimport: internal error ({nd:#x})") from None

    def resolve(token: str, allow_inv: bool) -> int:
        if token == "F":
            return FALSE
        if token == "T":
            return TRUE
        nd = int(token)
        if allow_inv and nd & 1:
            return manager.not_(lookup(nd ^ 1))
        return manager.copy(lookup(nd))

    try:
        for _ in range(num_nodes):
            nd = int(_next_token(tokens))
            var = manager.var_of_lev(int(_next_token(tokens)))
            f0 = resolve(_next_token(tokens), allow_inv=False)
            try:
                f1 = resolve(_next_token(tokens), allow_inv=True)
            except BaseException:
                manager.free(f0)
                raise
            if zbdd:
                f = manager._getzbddp(var, f0, f1)
            else:
                f = manager._getbddp(var, f0, f1)
            if nd in built:
                manager.free(f)
                raise BDDError(f"bddimport: internal error ({nd:#x})")
            built[nd] = f

        count = num_roots if limit is None else min(num_roots, limit)
        for _ in range(count):
            roots.append(resolve(_next_token(tokens), allow_inv=True))
    except BaseException:
        for f in roots:
            manager.free(f)
        for f in built.values():
            manager.free(f)
        raise

    for f in built.values():
        manager.free(f)
    return roots


def import_bdd(manager: Manager, stream: TextIO, limit: int | None = None) -> list[int]:
    """Read BDDs written by :func:`export`; return at most ``limit`` roots."""
    return _import(manager, stream, limit, zbdd=False)


def import_zbdd(manager: Manager, stream: TextIO, limit: int | None = None) -> list[int]:
    """Read ZBDDs written by :func:`export`; return at most ``limit`` roots."""
    return _import(manager, stream, limit, zbdd=True)


def _node_text(f: int) -> str:
    if is_const(f):
        return str(strip(const_value(f)))
    return f"N{node_index(f)}"


def _dump_nodes(manager: Manager, roots: list[int]) -> list[str]:
    lines = []
    for idx in _postorder(manager, roots, set()):
        v = manager._var[idx]
        f0 = strip(manager._f0[idx])
        f1 = manager._f1[idx]
        f0_text = str(const_value(f0)) if is_const(f0) else f"N{node_index(f0)}"
        f1_text = ("~" if is_neg(f1) else "") + _node_text(f1)
        line = f"N{idx} = [V{v}({manager._lev[v]}), {f0_text}, {f1_text}]"
        if manager._is_z(idx):
            line += " #Z"
        lines.append(line + "\n")
    return lines


def _root_text(f: int) -> str:
    return ("~" if is_neg(f) else "") + _node_text(f)


def dump(manager: Manager, f: int | None, stream: TextIO | None = None) -> None:
    """Print the nodes of ``f`` and its root in a readable form."""
    out = stream if stream is not None else sys.stdout
    if f is None:
        out.write("RT = NULL\n\n")
        return
    manager._check(f, "bdddump")
    lines = _dump_nodes(manager, [f])
    lines.append(f"RT = {_root_text(f)}\n\n")
    out.write("".join(lines))


def vdump(manager: Manager, roots: Iterable[int | None], stream: TextIO | None = None) -> None:
    """Print the shared nodes of several roots; prints nothing if any is None."""
    out = stream if stream is not None else sys.stdout
    chosen = list(roots)
    for f in chosen:
        if f is None:
            return
        manager._check(f, "bddvdump")
    lines = _dump_nodes(manager, chosen)
    lines.extend(f"RT{i} = {_root_text(f)}\n" for i, f in enumerate(chosen))
    lines.append("\n")
    out.write("".join(lines))