"""Tests for date and amount parsing."""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from ledgerflow.utils.amount_parser import parse_amount
from ledgerflow.utils.date_parser import parse_date, tax_year_for, tax_year_range


def test_parse_absolute_date():
    """Test parsing ISO dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_day_first_dates():
    """Statement dates put the day first."""
    assert parse_date("03/04/2024") == date(2024, 4, 3)
    assert parse_date("15 Jan 2024") == date(2024, 1, 15)


def test_parse_today():
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    result = parse_date(" Yesterday ")
    assert result == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    result = parse_date("tomorrow")
    assert result == date.today() + timedelta(days=1)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_tax_year_range():
    """Tax year N runs from 1 March N-1 to the end of February N."""
    assert tax_year_range(2025) == (date(2024, 3, 1), date(2025, 2, 28))


def test_tax_year_range_leap_year():
    assert tax_year_range(2024) == (date(2023, 3, 1), date(2024, 2, 29))


@pytest.mark.parametrize(
    "day,expected",
    [
        (date(2024, 2, 29), 2024),
        (date(2024, 3, 1), 2025),
        (date(2024, 12, 31), 2025),
        (date(2025, 1, 1), 2025),
    ],
)
def test_tax_year_for(day, expected):
    assert tax_year_for(day) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("R123.45", Decimal("123.45")),
        ("ZAR 1 234.56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("123,45", Decimal("123.45")),
        ("(50.00)", Decimal("-50.00")),
        ("(R 50)", Decimal("-50")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "R", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
