"""Tests for the fuzzy key matcher."""

from __future__ import annotations

import datetime as dt

import pytest

from sheetjoin.matching import match_tier, values_match


def test_absent_never_matches():
    assert not values_match(None, None)
    assert not values_match(None, "")
    assert not values_match(float("nan"), float("nan"))
    assert not values_match("1", None)


def test_structural_equality():
    assert match_tier(5, 5) == "exact"
    assert match_tier("abc", "abc") == "exact"
    assert match_tier(True, True) == "exact"


def test_text_equality_ignores_case_and_outer_spaces():
    assert match_tier("ABC", " abc ") == "text"
    assert match_tier(" 7 ", "7") == "text"
    assert match_tier(True, "TRUE") == "text"
    assert match_tier(1, "1") == "text"
    assert match_tier(dt.datetime(2024, 1, 5), "2024-01-05") == "text"


def test_numeric_equality():
    assert match_tier("7.00", 7) == "numeric"
    assert match_tier(1.00001, "1") == "numeric"
    assert not values_match(1.001, 1)


def test_non_matches():
    assert not values_match("abc", "abd")
    assert not values_match("1,5", 1.5)
    assert not values_match("A1", "a 1")


@pytest.mark.parametrize(
    "a, b",
    [
        ("ABC", "abc"),
        (" 7 ", 7),
        ("7.0", "7"),
        (1.00001, "1"),
        ("x", "y"),
        (None, "1"),
        (True, "true"),
    ],
)
def test_matcher_is_symmetric(a, b):
    assert values_match(a, b) == values_match(b, a)


def test_time_values_match_their_text():
    assert match_tier(dt.time(9, 30), "09:30:00") == "text"
    assert match_tier(dt.time(9, 30), dt.time(9, 30)) == "exact"
    assert not values_match(dt.time(9, 30), "9:30")
