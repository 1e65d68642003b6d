"""
Clock strings as the Time Keeper page renders them.

The page uses en-US formatting with numeric hour, 2-digit minute and a
12-hour clock ("9:05 AM"). Browsers with recent ICU data put a narrow
no-break space before the day period, so rendered text is normalized
before comparing.
"""
from __future__ import annotations

import datetime
import re
from zoneinfo import ZoneInfo

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")
_SPACES = {"\u202f": " ", "\u00a0": " "}


def normalize_clock_text(text: str) -> str:
    for special, plain in _SPACES.items():
        text = text.replace(special, plain)
    return " ".join(text.split())


def format_clock_time(moment: datetime.datetime) -> str:
    """Format a datetime like Intl.DateTimeFormat('en-US', {hour12: true})."""
    hour = moment.hour % 12 or 12
    period = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {period}"


def current_clock_time(timezone_id: str, now: datetime.datetime | None = None) -> str:
    """Current wall clock time in an IANA zone, formatted for comparison."""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return format_clock_time(now.astimezone(ZoneInfo(timezone_id)))


def clock_minutes(text: str) -> int:
    """
    Minutes since midnight for a rendered clock string.

    Raises:
        ValueError: text is not an "h:MM AM/PM" clock string.
    """
    match = _CLOCK_RE.match(normalize_clock_text(text))
    if match is None:
        raise ValueError(f"Not a 12-hour clock string: {text!r}")

    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        raise ValueError(f"Clock value out of range: {text!r}")

    hour %= 12
    if period == "PM":
        hour += 12
    return hour * 60 + minute
