"""Date parsing utilities."""

from datetime import date, datetime, timedelta
import re

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-14", "January 14, 2024", etc.
    - Relative dates: "today", "yesterday", "last sunday", "this wednesday"

    Args:
        date_str: Date string in various formats

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

    if date_str.startswith("last "):
        period = date_str[5:]
        if period in WEEKDAYS:
            # Most recent such day strictly before today
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7
            if days_ago == 0:
                days_ago = 7
            return today - timedelta(days=days_ago)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period in WEEKDAYS:
            # Such day within the current Monday-to-Sunday week
            return today - timedelta(days=today.weekday()) + timedelta(days=WEEKDAYS.index(period))

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def is_iso_date(value: str) -> bool:
    """Return True if value is a real calendar date written as YYYY-MM-DD."""
    if not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_month(month_str: str) -> str:
    """Parse a month into "YYYY-MM" form.

    Accepts "2024-03", "this month", "last month" or anything dateutil can
    read as a date ("March 2024").

    Raises:
        ValueError: If month string cannot be parsed
    """
    month_str = month_str.strip().lower()
    today = date.today()

    if month_str == "this month":
        return today.strftime("%Y-%m")
    if month_str == "last month":
        return (today - relativedelta(months=1)).strftime("%Y-%m")

    match = _ISO_MONTH.match(month_str)
    if match:
        if not 1 <= int(match.group(2)) <= 12:
            raise ValueError(f"Could not parse month '{month_str}': month out of range")
        return month_str

    try:
        dt = date_parser.parse(month_str, default=datetime(2000, 1, 1))
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse month '{month_str}': {e}")
    return dt.strftime("%Y-%m")
