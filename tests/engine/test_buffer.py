import pytest

from nestrepl.engine.buffer import ExpressionBuffer
from nestrepl.engine.types import AmendOutOfRange


def _buffer(*lines):
    buf = ExpressionBuffer()
    for line in lines:
        buf.append(line)
    return buf


def test_append_keeps_line_terminators():
    buf = _buffer("def f():", "    return 1")
    assert buf.lines == ["def f():\n", "    return 1\n"]
    assert buf.text == "def f():\n    return 1\n"
    assert len(buf) == 2


def test_replace_adds_missing_final_newline():
    buf = ExpressionBuffer()
    buf.replace("a = 1\nb = 2")
    assert buf.lines == ["a = 1\n", "b = 2\n"]


@pytest.mark.parametrize(
    "start,end",
    [(0, None), (2, None), (0, 2), (1, 2), (-1, None), (-3, -2), (-2, -1)],
)
def test_amend_replaces_exactly_the_selected_lines(start, end):
    original = ["a\n", "b\n", "c\n"]
    buf = _buffer("a", "b", "c")

    assert buf.amend(start, end, "x") is True

    lo = start % 3
    hi = (end if end is not None else start) % 3
    assert buf.lines == original[:lo] + ["x\n"] + original[hi + 1 :]


def test_amend_with_sentinel_deletes_lines():
    buf = _buffer("a", "b", "c", "d")
    buf.amend(1, 2, "!")
    assert buf.lines == ["a\n", "d\n"]

    buf.amend(-1, None, "!")
    assert buf.lines == ["a\n"]


def test_amend_on_empty_buffer_is_a_no_op():
    buf = ExpressionBuffer()
    assert buf.amend(0, None, "x") is False
    assert buf.is_empty


@pytest.mark.parametrize("start,end", [(3, None), (-4, None), (0, 5), (2, 1)])
def test_amend_out_of_range_leaves_buffer_untouched(start, end):
    buf = _buffer("a", "b", "c")
    with pytest.raises(AmendOutOfRange):
        buf.amend(start, end, "x")
    assert buf.lines == ["a\n", "b\n", "c\n"]
