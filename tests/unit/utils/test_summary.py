import pytest

from casemap import CaseInsensitiveMap
from casemap.utils.representation.summary import format_summary_box, summarize_value


@pytest.mark.unit
def test_box_layout():
    box = format_summary_box(title="T", rows=[("a", "1"), ("flag", "")])
    lines = box.splitlines()
    assert lines[0].startswith("┌─ T ")
    assert lines[-1].startswith("└")
    assert "│ a : 1" in lines[1]
    assert "│ flag" in lines[2]
    # All lines share the same width
    assert len({len(line) for line in lines}) == 1


@pytest.mark.unit
def test_empty_rows():
    assert "(empty)" in format_summary_box(title="T", rows=[])


@pytest.mark.unit
def test_nested_rows_inline_when_short():
    box = format_summary_box(title="T", rows=[("entries", [("A", "1"), ("B", "")])])
    assert "entries : [A=1, B]" in box


@pytest.mark.unit
def test_nested_rows_expand_when_long():
    rows = [("entries", [("Key", "x" * 30), ("Other", "y" * 30)])]
    box = format_summary_box(title="T", rows=rows, max_width=40)
    assert "│ entries :" in box
    assert "│   Key : " in box


@pytest.mark.unit
def test_long_lines_are_truncated():
    box = format_summary_box(title="T", rows=[("k", "v" * 200)], max_width=20)
    assert all(len(line) <= 24 for line in box.splitlines())
    assert "..." in box


@pytest.mark.unit
def test_invalid_row_raises():
    with pytest.raises(ValueError, match="Invalid SummaryRow"):
        format_summary_box(title="T", rows=["not a tuple"])


@pytest.mark.unit
def test_summarize_value_uses_repr():
    assert summarize_value("text") == "'text'"

    class Multi:
        def __repr__(self):
            return "line one\nline two"

    assert summarize_value(Multi()) == [("0", "line one"), ("1", "line two")]


@pytest.mark.unit
def test_summarize_value_uses_nested_rows():
    rows = summarize_value(CaseInsensitiveMap({"Inner": 1}))
    assert rows[0] == ("size", "1")
    assert rows[-1] == ("entries", [("Inner", "1")])
