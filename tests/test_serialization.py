import io
import itertools

import pytest

from zddkit.nodes import FALSE, TRUE, BDDError
from zddkit.operations import Manager
from zddkit.serialization import dump, export, import_bdd, import_zbdd, vdump


def _bdd_sample(m):
    for _ in range(3):
        m.new_var()
    x1, x2, x3 = (m.prime(v) for v in (1, 2, 3))
    a = m.and_(x1, m.not_(x2))
    return m.or_(a, x3), (x1, x2, x3)


def _zbdd_sample(m):
    for _ in range(3):
        m.new_var()
    s1 = m.change(TRUE, 1)
    s23 = m.change(m.change(TRUE, 2), 3)
    return m.union(m.union(s1, s23), TRUE)


def _eval(m, f, values):
    for v, bit in values.items():
        f = m.at1(f, v) if bit else m.at0(f, v)
    return f == TRUE


def _export_text(m, roots):
    buf = io.StringIO()
    export(m, buf, roots)
    return buf.getvalue()


def test_export_constants():
    m = Manager()
    assert _export_text(m, [FALSE, TRUE]) == "_i 0\n_o 2\n_n 0\nF\nT\n"


def test_import_constants():
    m = Manager()
    roots = import_bdd(m, io.StringIO("_i 0\n_o 2\n_n 0\nF\nT\n"))
    assert roots == [FALSE, TRUE]


def test_export_header_reflects_graph():
    m = Manager()
    f, _ = _bdd_sample(m)
    lines = _export_text(m, [f]).splitlines()
    assert lines[0] == "_i 3"
    assert lines[1] == "_o 1"
    assert int(lines[2].split()[1]) == m.size(f)
    assert len(lines) == 3 + m.size(f) + 1
    assert int(lines[-1]) == f


def test_export_stops_at_none():
    m = Manager()
    _, (x1, _, x3) = _bdd_sample(m)
    lines = _export_text(m, [x1, None, x3]).splitlines()
    assert lines[1] == "_o 1"
    assert int(lines[-1]) == x1


def test_negated_root_is_odd():
    m = Manager()
    _, (x1, _, _) = _bdd_sample(m)
    last = int(_export_text(m, [m.not_(x1)]).splitlines()[-1])
    assert last % 2 == 1
    assert last ^ 1 == x1


def test_bdd_round_trip_same_manager():
    m = Manager()
    f, (x1, _, x3) = _bdd_sample(m)
    text = _export_text(m, [f, x1, x3])
    assert import_bdd(m, io.StringIO(text)) == [f, x1, x3]


def test_bdd_round_trip_fresh_manager():
    m = Manager()
    f, _ = _bdd_sample(m)
    text = _export_text(m, [f])
    m2 = Manager()
    (g,) = import_bdd(m2, io.StringIO(text))
    assert m2.var_used() == 3
    assert m2.size(g) == m.size(f)
    assert m2.is_bdd(g)
    for bits in itertools.product((0, 1), repeat=3):
        values = dict(zip((1, 2, 3), bits))
        expected = (bits[0] and not bits[1]) or bits[2]
        assert _eval(m2, g, values) == bool(expected)
        assert _eval(m, f, values) == bool(expected)


def test_reexport_is_identical():
    m = Manager()
    f, _ = _bdd_sample(m)
    text = _export_text(m, [f])
    m2 = Manager()
    roots = import_bdd(m2, io.StringIO(text))
    text2 = _export_text(m2, roots)
    assert text2.splitlines()[:3] == text.splitlines()[:3]
    assert len(text2.splitlines()) == len(text.splitlines())


def test_zbdd_round_trip():
    m = Manager()
    fam = _zbdd_sample(m)
    assert m.card(fam) == 3
    text = _export_text(m, [fam])
    assert import_zbdd(m, io.StringIO(text)) == [fam]
    m2 = Manager()
    (g,) = import_zbdd(m2, io.StringIO(text))
    assert m2.is_zbdd(g)
    assert m2.card(g) == m.card(fam)
    assert m2.lit(g) == m.lit(fam)
    assert m2.size(g) == m.size(fam)


def test_import_limit():
    m = Manager()
    f, (x1, _, _) = _bdd_sample(m)
    text = _export_text(m, [f, x1, TRUE])
    roots = import_bdd(m, io.StringIO(text), limit=2)
    assert roots == [f, x1]


def test_import_creates_variables():
    m = Manager()
    import_bdd(m, io.StringIO("_i 4\n_o 0\n_n 0\n"))
    assert m.var_used() == 4


def test_import_bad_header():
    m = Manager()
    with pytest.raises(ValueError):
        import_bdd(m, io.StringIO("_x 0\n_o 0\n_n 0\n"))


def test_import_truncated_releases_nodes():
    m = Manager()
    f, _ = _bdd_sample(m)
    tokens = _export_text(m, [f]).split()
    assert m.size(f) >= 2
    partial = " ".join(tokens[: 6 + 4 + 2])
    m2 = Manager()
    with pytest.raises(ValueError):
        import_bdd(m2, io.StringIO(partial))
    m2.gc()
    assert m2.used() == 0


def test_import_unknown_reference():
    m = Manager()
    with pytest.raises(BDDError):
        import_bdd(m, io.StringIO("_i 1\n_o 1\n_n 1\n0 1 F 8\n0\n"))


def test_dump_none_and_constants():
    m = Manager()
    buf = io.StringIO()
    dump(m, None, buf)
    dump(m, FALSE, buf)
    assert buf.getvalue() == "RT = NULL\n\nRT = 0\n\n"


def test_dump_prime():
    m = Manager()
    m.new_var()
    x = m.prime(1)
    buf = io.StringIO()
    dump(m, x, buf)
    assert buf.getvalue() == "N0 = [V1(1), 0, ~0]\nRT = N0\n\n"


def test_dump_marks_zbdd_nodes():
    m = Manager()
    fam = _zbdd_sample(m)
    buf = io.StringIO()
    dump(m, fam, buf)
    node_lines = [line for line in buf.getvalue().splitlines() if line.startswith("N")]
    assert len(node_lines) == m.size(fam)
    assert all(line.endswith(" #Z") for line in node_lines)


def test_dump_invalid_edge():
    m = Manager()
    with pytest.raises(BDDError):
        dump(m, 40, io.StringIO())


def test_vdump_with_none_prints_nothing():
    m = Manager()
    _, (x1, _, _) = _bdd_sample(m)
    buf = io.StringIO()
    vdump(m, [x1, None], buf)
    assert buf.getvalue() == ""


def test_vdump_shares_nodes():
    m = Manager()
    f, (_, _, x3) = _bdd_sample(m)
    buf = io.StringIO()
    vdump(m, [f, x3], buf)
    lines = buf.getvalue().splitlines()
    node_lines = [line for line in lines if line.startswith("N")]
    assert len(node_lines) == m.vsize([f, x3])
    assert lines[-3].startswith("RT0 = ")
    assert lines[-2].startswith("RT1 = ")
    assert lines[-1] == ""