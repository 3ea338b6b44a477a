"""Tests for shared helpers."""

from datetime import UTC, datetime

import pytest

from mnemo.utils import (
    MAX_SQLITE_INT,
    compact_json,
    estimate_tokens,
    expiry_from_ttl,
    ms_to_datetime,
    now_ms,
    safe_json_loads,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ('{"a": 1}', {"a": 1}),
        ("[1, 2]", [1, 2]),
        ("null", None),
        ("", "fallback"),
        (None, "fallback"),
        (b'{"a": 1}', "fallback"),
        ("{not json", "fallback"),
        ('{"a": ', "fallback"),
    ],
)
def test_safe_json_loads(value, expected):
    """Test that malformed input returns the fallback instead of raising."""
    assert safe_json_loads(value, "fallback") == expected


def test_compact_json():
    assert compact_json({"a": [1, 2], "b": "✓"}) == '{"a":[1,2],"b":"✓"}'


@pytest.mark.parametrize(
    ("text", "expected"),
    [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 400, 100)],
)
def test_estimate_tokens(text, expected):
    assert estimate_tokens(text) == expected


def test_estimate_tokens_custom_ratio():
    assert estimate_tokens("abcdef", chars_per_token=3) == 2


def test_now_ms_is_epoch_milliseconds():
    before = int(datetime.now(UTC).timestamp() * 1000)
    value = now_ms()

    assert isinstance(value, int)
    assert abs(value - before) < 5_000


def test_ms_to_datetime():
    assert ms_to_datetime(None) is None
    assert ms_to_datetime(0) == datetime(1970, 1, 1, tzinfo=UTC)
    assert ms_to_datetime(1_500) == datetime(1970, 1, 1, 0, 0, 1, 500_000, tzinfo=UTC)


def test_ms_to_datetime_out_of_range():
    """Test that values outside the datetime range are clamped."""
    assert ms_to_datetime(MAX_SQLITE_INT) == datetime.max.replace(tzinfo=UTC)
    assert ms_to_datetime(-MAX_SQLITE_INT) == datetime.min.replace(tzinfo=UTC)


@pytest.mark.parametrize(
    ("ttl", "expected"),
    [
        (None, None),
        (0, None),
        (0.0, None),
        (10, 1_010_000),
        (0.5, 1_000_500),
        (-1, 999_000),
        (-0.0001, 999_999),
    ],
)
def test_expiry_from_ttl(ttl, expected):
    assert expiry_from_ttl(ttl, 1_000_000) == expected


def test_expiry_from_ttl_clamps():
    assert expiry_from_ttl(1e308, 1_000_000) == MAX_SQLITE_INT
    assert -MAX_SQLITE_INT <= expiry_from_ttl(-1e308, 1_000_000) < 0
