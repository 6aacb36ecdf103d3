"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# South African tax years run from 1 March to the end of February
TAX_YEAR_START_MONTH = 3


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Day-first dates as printed on local statements: "15/01/2024", "15 Jan 2024"
    - Relative dates: "today", "yesterday", "tomorrow"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        # ISO strings parse unambiguously; everything else is day-first
        dayfirst = not (len(date_str) >= 10 and date_str[4] == "-")
        return date_parser.parse(date_str, dayfirst=dayfirst).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def tax_year_range(tax_year: int) -> tuple[date, date]:
    """Get start and end dates of a South African tax year.

    Tax year 2025 runs from 1 March 2024 to 28 February 2025.

    Args:
        tax_year: Year in which the tax year ends

    Returns:
        Tuple of (start_date, end_date)
    """
    start_date = date(tax_year - 1, TAX_YEAR_START_MONTH, 1)
    end_date = start_date + relativedelta(years=1) - timedelta(days=1)
    return (start_date, end_date)


def tax_year_for(day: date) -> int:
    """Return the tax year a date falls in."""
    return day.year + 1 if day.month >= TAX_YEAR_START_MONTH else day.year
