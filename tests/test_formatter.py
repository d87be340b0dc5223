"""Tests for rendering values in seconds, clock and move-count notation."""

from __future__ import annotations

import pytest

from src.timing.formatter import format_penalized, format_value


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (5.89, "5.89"),
        (0.0, "0.00"),
        (59.99, "59.99"),
        (60.0, "1:00.00"),
        (62.34, "1:02.34"),
        (605.5, "10:05.50"),
        (3599.99, "59:59.99"),
        (3600.0, "1:00:00.00"),
        (3723.45, "1:02:03.45"),
        (36005.1, "10:00:05.10"),
    ],
)
def test_time_values_use_growing_clock_notation(value: float, expected: str) -> None:
    assert format_value(value) == expected


def test_missing_and_sentinel_values() -> None:
    assert format_value(None) == "-"
    assert format_value(None, True) == "-"
    assert format_value(float("inf")) == "DNF"
    assert format_value(float("inf"), True) == "DNF"
    assert format_value(-0.5) == "-"
    assert format_value(float("nan")) == "-"


def test_move_counts_drop_decimals_only_for_whole_numbers() -> None:
    assert format_value(28, True) == "28"
    assert format_value(28.0, True) == "28"
    assert format_value(83 / 3, True) == "27.67"
    assert format_value(72.5, True) == "72.50"


def test_rounding_up_to_a_full_minute_carries() -> None:
    assert format_value(119.999) == "2:00.00"
    assert format_value(3599.999) == "1:00:00.00"
    assert format_value(7199.999) == "2:00:00.00"


def test_penalized_values_carry_marker() -> None:
    assert format_penalized(7.0) == "7.00+"
    assert format_penalized(62.0) == "1:02.00+"
