"""Tests for plain-text report building."""

from collections import namedtuple

import numpy as np
import pytest

from celldb.core.format import (
    RULE_WIDTH,
    attach_format,
    fmt_number,
    footer,
    key_value,
    render,
    render_table,
    rule,
    section,
    title_block,
)


def test_rule():
    assert rule() == "=" * RULE_WIDTH
    assert rule("-", 10) == "-" * 10


def test_title_block():
    assert title_block("Title") == [rule(), " Title", rule()]
    assert title_block("Title", "sub")[1:3] == [" Title", " sub"]


def test_section_and_footer():
    assert section("Loadings") == ["", rule("-"), " Loadings", rule("-")]
    assert footer() == [rule()]
    assert footer("note") == [rule(), " note"]


def test_key_value():
    assert key_value("Samples", 3) == " Samples: 3"
    assert key_value("Samples", 3, indent=3) == "   Samples: 3"


@pytest.mark.parametrize(
    "value,expected",
    [(0.66666, "0.6667"), (np.float64(1.5), "1.5000"), (3, "3"), (None, "NA"), (np.nan, "NA")],
)
def test_fmt_number(value, expected):
    assert fmt_number(value) == expected


def test_fmt_number_digits():
    assert fmt_number(2.0, digits=1) == "2.0"


def test_render_table_alignment():
    lines = render_table(["Sample", "Measured"], [["s1", 3], ["s22", 4]], left=("Sample",))
    body = "\n".join(lines)
    assert "│" in body
    assert "s22" in body
    row = next(line for line in lines if "s1 " in line)
    assert row.index("s1") < row.index("3")


def test_render_stretches_rules():
    text = render([rule(), "x" * 90, rule("-")])
    lines = text.split("\n")
    assert lines[0] == "=" * 90
    assert lines[2] == "-" * 90


def test_render_keeps_default_width():
    assert render([rule("-"), "short"]).split("\n")[0] == "-" * RULE_WIDTH


def test_attach_format():
    Result = namedtuple("Result", ["value"])
    attach_format(Result, lambda r: f"value={r.value}")
    assert repr(Result(2)) == "value=2"
    assert str(Result(2)) == "value=2"
