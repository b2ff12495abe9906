"""
Tests for Gmail filter query construction.
"""

import pytest

from app.services.gmail.filter_query import build_filter_query


def test_name_only():
    assert build_filter_query("Bob", [], []) == '"Bob"'


def test_senders_and_keywords():
    query = build_filter_query("Alice", ["a@x.com"], ["homework"])
    assert query == '"Alice" AND ((from:a@x.com) OR ("homework"))'


def test_two_senders_and_one_keyword():
    query = build_filter_query("Alice", ["a@x.com", "b@y.com"], ["homework"])
    assert query == '"Alice" AND ((from:a@x.com OR from:b@y.com) OR ("homework"))'


def test_multiple_senders_only():
    query = build_filter_query("Sam", ["a@x.com", "b@y.org"], [])
    assert query == '"Sam" AND ((from:a@x.com OR from:b@y.org))'


def test_multiple_keywords_only():
    query = build_filter_query("Sam", [], ["field trip", "permission slip"])
    assert query == '"Sam" AND (("field trip" OR "permission slip"))'


def test_full_shape():
    query = build_filter_query("Kid", ["a@x.com", "b@y.org"], ["k1", "k2"])
    assert query == '"Kid" AND ((from:a@x.com OR from:b@y.org) OR ("k1" OR "k2"))'


def test_quotes_are_not_escaped():
    assert build_filter_query('Jo "JJ"', [], []) == '"Jo "JJ""'


def test_empty_name_rejected():
    with pytest.raises(ValueError):
        build_filter_query("", ["a@x.com"], ["homework"])
