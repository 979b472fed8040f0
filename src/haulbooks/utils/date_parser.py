"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports "today", "yesterday", ISO dates and the free-form formats
    dateutil understands ("January 15, 2024", "03/01/2024", ...).

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
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_iso_date(value: str | date | datetime) -> date:
    """Parse an ISO date or timestamp into a local calendar date.

    Timezone-aware timestamps (e.g. "2024-03-31T23:30:00Z") are converted to
    local time first, so the result is the calendar day the user saw.

    Raises:
        ValueError: If the value is not ISO formatted
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    else:
        try:
            dt = date_parser.isoparse(value.strip())
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"Could not parse ISO date '{value}': {e}")

    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.date()
