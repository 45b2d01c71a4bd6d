from __future__ import annotations

import re
import time
from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Current wall-clock time at the site.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(ZoneInfo(tz_name))


def today_iso(tz_name: str = DEFAULT_TIMEZONE) -> str:
    """YYYY-MM-DD for the site's timezone, not the host's."""
    return now_local(tz_name).strftime("%Y-%m-%d")


def current_month_iso(tz_name: str = DEFAULT_TIMEZONE) -> str:
    return today_iso(tz_name)[:7]


def db_timestamp(tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Timestamp in the `YYYY-MM-DD HH:MM:SS` form stored in the sheet."""
    return now_local(tz_name).strftime("%Y-%m-%d %H:%M:%S")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def date_only(value: object) -> str:
    """Strip any time component from a date-ish value.

    `"2025-12-25 00:00:00"` and `"2025-12-25T00:00:00.000Z"` both become
    `"2025-12-25"`. Missing values become `""`.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text.split(" ")[0].split("T")[0]


def is_iso_date(value: str) -> bool:
    if not value or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True
