import pytest

from zddkit.converters import ToBDD, ToZBDD
from zddkit.nodes import FALSE, TRUE
from zddkit.operations import Manager


def test_bdd_initialize_creates_vars():
    m = Manager()
    ToBDD(m).initialize(2)
    assert m.var_used() == 2
    ToBDD(m, offset=1).initialize(3)
    assert m.var_used() == 4


def test_terminals():
    m = Manager()
    assert ToBDD(m).eval_terminal(1) == TRUE
    assert ToBDD(m).eval_terminal(0) == FALSE
    assert ToZBDD(m).eval_terminal(1) == TRUE
    assert ToZBDD(m).eval_terminal(0) == FALSE


def test_bdd_node_is_variable():
    m = Manager()
    conv = ToBDD(m)
    conv.initialize(2)
    f = conv.eval_node(1, [(FALSE, 0), (TRUE, 0)])
    x = m.prime(m.var_of_lev(1))
    assert f == x
    assert m.eval_node_count if False else m.size(f) == 1


def test_bdd_node_equal_children_collapse():
    m = Manager()
    conv = ToBDD(m)
    conv.initialize(1)
    assert conv.eval_node(1, [(TRUE, 0), (TRUE, 0)]) == TRUE


def test_bdd_two_level_structure():
    m = Manager()
    conv = ToBDD(m)
    conv.initialize(2)
    x1 = conv.eval_node(1, [(FALSE, 0), (TRUE, 0)])
    f = conv.eval_node(2, [(x1, 1), (TRUE, 0)])
    v2 = m.var_of_lev(2)
    assert m.at1(f, v2) == TRUE
    assert m.at0(f, v2) == x1


def test_bdd_nonpositive_level_raises():
    m = Manager()
    conv = ToBDD(m, offset=-1)
    with pytest.raises(ValueError):
        conv.eval_node(1, [(FALSE, 0), (TRUE, 0)])


def test_zbdd_single_set():
    m = Manager()
    conv = ToZBDD(m)
    conv.initialize(2)
    f = conv.eval_node(1, [(FALSE, 0), (TRUE, 0)])
    assert f == m.change(TRUE, m.var_of_lev(1))
    assert m.card(f) == 1
    assert m.is_zbdd(f)


def test_zbdd_union_of_children():
    m = Manager()
    conv = ToZBDD(m)
    conv.initialize(2)
    a = conv.eval_node(1, [(FALSE, 0), (TRUE, 0)])
    f = conv.eval_node(2, [(a, 1), (TRUE, 0)])
    assert m.card(f) == 2
    assert m.length(f) == 1


def test_zbdd_nonpositive_level_keeps_zero_branch():
    m = Manager()
    m.new_var()
    a = m.change(TRUE, 1)
    f = ToZBDD(m, offset=-1).eval_node(1, [(a, 0), (TRUE, 0)])
    assert f == a
    assert m.card(f) == 1