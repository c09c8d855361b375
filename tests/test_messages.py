import io
import time
from unittest import mock

import pytest

from zddkit.messages import MessageHandler, capitalize, show_messages


@pytest.fixture(autouse=True)
def enabled():
    previous = show_messages(True)
    yield
    show_messages(previous)


def test_capitalize():
    assert capitalize("sweeping") == "Sweeping"
    assert capitalize("") == ""
    assert capitalize("a") == "A"


def test_show_messages_returns_previous():
    assert show_messages(False) is True
    assert show_messages(True) is False


def test_disabled_writes_nothing():
    show_messages(False)
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("sweeping")
    mh.write("text")
    mh.end()
    assert buf.getvalue() == ""


def test_single_line_section():
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("sweeping")
    mh.end()
    out = buf.getvalue()
    assert out.startswith("Sweeping done in ")
    assert out.endswith(".\n")
    assert mh.column() == 0


def test_end_with_size_reports_info():
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("sweeping").write(" <7> ...")
    mh.end_with_size(5)
    assert buf.getvalue().startswith("Sweeping <7> ... <5> in ")


def test_dots_for_quick_steps():
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("work")
    for _ in range(10):
        mh.step()
    mh.end()
    assert buf.getvalue().startswith("Work .......... done in ")


def test_nested_sections_indent():
    buf = io.StringIO()
    outer = MessageHandler(buf)
    inner = MessageHandler(buf)
    outer.begin("outer")
    inner.begin("inner")
    inner.end()
    outer.end()
    lines = buf.getvalue().splitlines()
    assert lines[0] == "Outer"
    assert lines[1].startswith("  Inner done in ")
    assert lines[2].startswith("Done outer in ")
    assert len(lines) == 3


def test_stepping_after_delay():
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("work")
    later = time.time() + 100
    with mock.patch("time.time", return_value=later):
        mh.step()
        mh.step()
        mh.step()
        mh.end()
    lines = buf.getvalue().splitlines()
    assert lines[0] == "Work"
    assert lines[1] == "  ---"
    assert lines[2].startswith("Done work in ")


def test_context_manager_aborts_open_section():
    buf = io.StringIO()
    with MessageHandler(buf) as mh:
        mh.begin("job")
    assert buf.getvalue().startswith("Job aborted in ")


def test_begin_without_name_uses_level():
    buf = io.StringIO()
    mh = MessageHandler(buf)
    mh.begin("")
    mh.end()
    assert buf.getvalue().startswith("Level-0 done in ")