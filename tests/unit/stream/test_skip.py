"""Tests for skip rules."""

import pytest

from streampatch.errors import InvalidArgumentError
from streampatch.stream.skip import SkipRule


def test_named_rules():
    assert SkipRule.NONE == SkipRule(False, False)
    assert SkipRule.LEFT == SkipRule(left=True)
    assert SkipRule.RIGHT == SkipRule(right=True)
    assert SkipRule.BOTH == SkipRule(True, True)


def test_rules_combine():
    assert SkipRule.LEFT | SkipRule.RIGHT == SkipRule.BOTH
    assert SkipRule.NONE | SkipRule.LEFT == SkipRule.LEFT


@pytest.mark.parametrize(
    "text,expected",
    [
        ("none", SkipRule.NONE),
        ("LEFT", SkipRule.LEFT),
        (" right ", SkipRule.RIGHT),
        ("both", SkipRule.BOTH),
        ("left|right", SkipRule.BOTH),
        ("left,none", SkipRule.LEFT),
    ],
)
def test_parse_names(text, expected):
    assert SkipRule.parse(text) == expected


def test_parse_passthrough():
    assert SkipRule.parse(None) is SkipRule.NONE
    assert SkipRule.parse(SkipRule.RIGHT) is SkipRule.RIGHT


def test_parse_rejects_unknown():
    with pytest.raises(InvalidArgumentError, match="sideways"):
        SkipRule.parse("sideways")
    with pytest.raises(InvalidArgumentError):
        SkipRule.parse(3)


def test_name_round_trips():
    for rule in (SkipRule.NONE, SkipRule.LEFT, SkipRule.RIGHT, SkipRule.BOTH):
        assert SkipRule.parse(rule.name) == rule
