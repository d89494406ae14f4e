"""Tests for patch extraction."""

import re

from streampatch.stream.extractor import compile_pattern, extract
from streampatch.stream.patch import Patch


def test_extract_bold_markers(bold):
    """Matches are removed and recorded in clean-stream coordinates."""
    pattern, raw = bold
    result = extract(pattern, raw)

    assert result.clean_stream == "HelloWorld!"
    assert result.patches == [
        Patch(position=5, sequence="{b}", length=3),
        Patch(position=10, sequence="{/b}", length=4),
    ]
    assert result.error is None


def test_positions_account_for_removed_text(tagged):
    pattern, raw = tagged
    result = extract(pattern, raw)

    assert result.clean_stream == "onetwothree"
    assert result.patches.positions() == [0, 3, 6, 11]
    assert [p.sequence for p in result.patches] == ["<a>", "<b>", "<c>", "<d>"]


def test_adjacent_matches_share_position():
    result = extract(r"<\d>", "a<1><2>b")

    assert result.clean_stream == "ab"
    assert result.patches.positions() == [1, 1]


def test_positions_sorted_and_within_stream():
    raw = "[x]lorem [y]ipsum[z] dolor [w]"
    result = extract(r"\[[a-z]\]", raw)

    positions = result.patches.positions()
    assert positions == sorted(positions)
    assert all(0 <= p <= len(result.clean_stream) for p in positions)
    assert positions[-1] == len(result.clean_stream)


def test_no_match_leaves_input_unchanged():
    result = extract(r"\d+", "no digits here")

    assert result.clean_stream == "no digits here"
    assert len(result.patches) == 0
    assert result.error is None


def test_malformed_pattern_matches_nothing():
    """An invalid expression degrades to zero matches, not an error."""
    result = extract(r"(unclosed", "some (unclosed text")

    assert result.clean_stream == "some (unclosed text"
    assert len(result.patches) == 0
    assert result.error is not None


def test_zero_width_matches_become_empty_patches():
    result = extract(r"\b", "ab cd")

    assert result.clean_stream == "ab cd"
    assert result.patches.positions() == [0, 2, 3, 5]
    assert all(p.length == 0 and p.sequence == "" for p in result.patches)


def test_compiled_pattern_and_flags():
    result = extract(re.compile("b"), "abAB", flags=re.IGNORECASE)

    assert result.clean_stream == "aA"
    assert [p.sequence for p in result.patches] == ["b", "B"]
    assert result.patches.positions() == [1, 2]


def test_compile_pattern_reports_error():
    compiled, error = compile_pattern("[")
    assert compiled is None
    assert error == "unterminated character set at position 0"

    compiled, error = compile_pattern("a+")
    assert compiled.pattern == "a+"
    assert error is None
