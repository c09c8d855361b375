from itertools import product

import pytest

from zddkit.cardinality import BddCardinality, ZddCardinality
from zddkit.nodetable import ONE, ZERO, NodeTable


def evaluate(table, root, ev):
    ev.initialize(root.row)
    vals = {(0, 0): ev.eval_terminal(False), (0, 1): ev.eval_terminal(True)}
    for i in range(1, root.row + 1):
        for j, node in enumerate(table[i]):
            vals[(i, j)] = ev.eval_node(
                i, [(vals[(c.row, c.col)], c.row) for c in node]
            )
    return ev.get_value(vals[(root.row, root.col)])


def brute_bdd(table, root, n, arity):
    count = 0
    for assign in product(range(arity), repeat=n):
        f = root
        while f.row > 0:
            f = table.node(f)[assign[f.row - 1]]
        count += f == ONE
    return count


def brute_zdd(table, root, n, arity):
    count = 0
    for assign in product(range(arity), repeat=n):
        f = root
        ok = True
        for level in range(n, 0, -1):
            if f.row == level:
                f = table.node(f)[assign[level - 1]]
            elif assign[level - 1] != 0:
                ok = False
                break
        count += ok and f == ONE
    return count


def binary_table():
    t = NodeTable(4, 2)
    n1 = t.add_node(1, [ZERO, ONE])
    n2 = t.add_node(2, [n1, ONE])
    n3 = t.add_node(3, [n2, n1])
    return t, n1, n2, n3


def ternary_table():
    t = NodeTable(4, 3)
    n1 = t.add_node(1, [ONE, ZERO, ONE])
    n3 = t.add_node(3, [n1, ONE, ZERO])
    return t, n3


def test_terminals():
    ev = BddCardinality(3)
    assert ev.eval_terminal(True) == 1
    assert ev.eval_terminal(False) == 0


@pytest.mark.parametrize("root_index", [0, 1, 2])
def test_bdd_count_matches_enumeration(root_index):
    t, *nodes = binary_table()
    root = nodes[root_index]
    assert evaluate(t, root, BddCardinality(3)) == brute_bdd(t, root, 3, 2)


@pytest.mark.parametrize("root_index", [0, 1, 2])
def test_zdd_count_matches_enumeration(root_index):
    t, *nodes = binary_table()
    root = nodes[root_index]
    assert evaluate(t, root, ZddCardinality()) == brute_zdd(t, root, 3, 2)


def test_ternary_counts_match_enumeration():
    t, root = ternary_table()
    assert evaluate(t, root, BddCardinality(3, 3)) == brute_bdd(t, root, 3, 3)
    assert evaluate(t, root, ZddCardinality(3)) == brute_zdd(t, root, 3, 3)


def test_bdd_true_counts_all_assignments():
    ev = BddCardinality(3)
    ev.initialize(0)
    assert ev.get_value(ev.eval_terminal(True)) == 8


def test_zdd_get_value_is_identity():
    ev = ZddCardinality()
    ev.initialize(5)
    assert ev.get_value(7) == 7


def test_large_count_is_exact():
    ev = BddCardinality(200)
    ev.initialize(0)
    assert ev.get_value(1) == 2**200


def test_invalid_arity():
    with pytest.raises(ValueError):
        BddCardinality(3, 0)
    with pytest.raises(ValueError):
        ZddCardinality(0)