"""Tests for amount parsing and coercion."""

from decimal import Decimal

import pytest

from givingbook.utils.amount_parser import coerce_amount, coerce_count, parse_amount


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123.45", Decimal("123.45")),
        ("₱1,234.50", Decimal("1234.50")),
        ("$20", Decimal("20")),
        ("(50.00)", Decimal("-50.00")),
        ("  75 ", Decimal("75")),
    ],
)
def test_parse_amount(value, expected):
    """Test parsing amounts in the formats people type."""
    assert parse_amount(value) == expected


@pytest.mark.parametrize("value", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_invalid(value):
    """Test unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("abc", Decimal("0")),
        (True, Decimal("0")),
        (float("nan"), Decimal("0")),
        (100, Decimal("100")),
        (12.5, Decimal("12.5")),
        ("1,000", Decimal("1000")),
        (Decimal("3.25"), Decimal("3.25")),
    ],
)
def test_coerce_amount(value, expected):
    """Test field values coerce to amounts with blank or invalid input as 0."""
    assert coerce_amount(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), ("", 0), ("x", 0), ("3", 3), (" 4 ", 4), ("2.5", 2), (7, 7), ("-1", -1)],
)
def test_coerce_count(value, expected):
    """Test denomination counts coerce to integers."""
    assert coerce_count(value) == expected
