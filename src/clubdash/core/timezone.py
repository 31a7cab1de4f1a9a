"""Timezone and date parsing utilities."""

from datetime import date, datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

from clubdash.config.settings import get_settings

# Formats seen in imported member records, tried before free-form parsing
DATE_FORMATS = ("%d-%b-%Y", "%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y")


def local_tz() -> pytz.BaseTzInfo:
    """Return the configured local timezone."""
    return pytz.timezone(get_settings().timezone)


def now_local() -> datetime:
    """Return current time in the configured timezone."""
    return datetime.now(local_tz())


def today_local() -> date:
    """Return today's date in the configured timezone."""
    return now_local().date()


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the configured timezone."""
    tz = local_tz()
    if dt.tzinfo is None:
        # Assume naive datetime is already local
        return tz.localize(dt)
    return dt.astimezone(tz)


def parse_date(value: str) -> Optional[date]:
    """
    Parse a date string in any of the accepted formats.

    Returns None when the value cannot be interpreted as a date.
    """
    value = value.strip()
    if not value:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return None
