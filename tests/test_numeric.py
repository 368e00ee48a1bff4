"""
Tests for numeric token parsing and tolerant matching.
"""

import pytest

from yt_tldr.numeric import (
    NumericToken,
    appears_in,
    numeric_substrings,
    parse_numeric_tokens,
    token_matches,
)


def test_parse_plain_and_separated_numbers():
    tokens = parse_numeric_tokens("BTC at 108000, ETH at $4,200.50")
    assert [t.value for t in tokens] == [108000.0, 4200.5]
    assert tokens[1].is_currency
    assert not tokens[0].is_currency


def test_parse_magnitude_suffixes():
    tokens = parse_numeric_tokens("targets 4.2k and 1.5M and 20K")
    assert [t.value for t in tokens] == [4200.0, 1_500_000.0, 20_000.0]


def test_suffix_not_taken_from_following_word():
    tokens = parse_numeric_tokens("3 months out")
    assert tokens[0].value == 3.0
    assert tokens[0].raw == "3"


def test_parse_percent():
    tokens = parse_numeric_tokens("down 12.5% and 3 %")
    assert tokens[0].is_percent and tokens[0].value == 12.5
    assert tokens[1].is_percent and tokens[1].value == 3.0


def test_parse_empty():
    assert parse_numeric_tokens("") == []
    assert parse_numeric_tokens("no digits here") == []


def test_numeric_substrings_raw_text():
    assert numeric_substrings("from $4,200 to 4.5k (+7%)") == ["$4,200", "4.5k", "7%"]


def test_token_key_strips_formatting():
    assert NumericToken(raw="$4,200", value=4200.0, is_currency=True).key == "4200"


@pytest.mark.parametrize("a,b,expected", [
    ("$4,200", "4200", True),
    ("4200", "4300", False),
    ("50%", "50", False),
    ("4.2k", "4200", True),
    ("108000", "108500", True),     # within 1%
    ("100", "102", False),
    ("0", "0.0", True),
    ("12%", "12 %", True),
])
def test_token_matches(a, b, expected):
    assert token_matches(a, b) is expected


def test_token_matches_tolerance_is_tunable():
    assert not token_matches("100", "104")
    assert token_matches("100", "104", tolerance=0.05)
    assert not token_matches("100", "100.5", tolerance=0.0)


def test_token_matches_non_numeric():
    assert not token_matches("abc", "100")


def test_appears_in_requires_every_number():
    source = "BTC tested 108000 support and ETH held 3200"
    assert appears_in("BTC held 108,000", source)
    assert appears_in("108000 and 3200", source)
    assert not appears_in("108000 and 120000", source)


def test_appears_in_without_numbers():
    assert appears_in("no numbers here", "anything")


def test_appears_in_accepts_parsed_tokens():
    tokens = parse_numeric_tokens("SOL broke above 150")
    assert appears_in("150", tokens)
    assert not appears_in("165", tokens)


def test_comma_joined_list_and_leading_dot():
    assert numeric_substrings("targets 4000,4500 and .5%") == ["4000", "4500", ".5%"]
    assert numeric_substrings("1,2345") == ["1", "2345"]
    assert parse_numeric_tokens(".5%")[0].value == 0.5


def test_decimal_point_is_not_formatting():
    assert not token_matches("4.5", "45")
    assert NumericToken(raw="4.5k", value=4500.0).key == "4.5k"
