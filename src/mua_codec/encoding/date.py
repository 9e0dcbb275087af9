"""RFC 1123 date-time codec.

Rendering keeps the value's own UTC offset (``Thu, 3 Dec 2020 00:00:00
+0100``); the day of month is not zero padded and a zero offset is written
as ``GMT``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from mua_codec.exceptions import FormatError, ValidationError, require

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_RFC_1123 = re.compile(
    r"(?:(?P<weekday>[A-Z][a-z]{2}),\s+)?"
    r"(?P<day>\d{1,2})\s+(?P<month>[A-Z][a-z]{2})\s+(?P<year>\d{4})\s+"
    r"(?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?\s+"
    r"(?P<offset>GMT|[+-]\d{4})"
)

# Offsets are limited to +/-18:00 like most date libraries do.
_MAX_OFFSET_MINUTES = 18 * 60


def _parse_offset(text: str) -> timezone:
    if text == "GMT":
        return timezone.utc
    hours, minutes = int(text[1:3]), int(text[3:5])
    total = hours * 60 + minutes
    if minutes > 59 or total > _MAX_OFFSET_MINUTES:
        raise FormatError(f"Invalid UTC offset: {text!r}")
    sign = -1 if text[0] == "-" else 1
    return timezone(timedelta(minutes=sign * total))


def decode(text: str) -> datetime:
    """Parse an RFC 1123 date-time into an aware datetime.

    Raises:
        FormatError: If the text has any other shape, names an unknown month
            or day, or describes an impossible date.
    """
    match = _RFC_1123.fullmatch(require(text, "text").strip())
    if match is None:
        raise FormatError(f"Not an RFC 1123 date: {text!r}")

    month = match["month"]
    if month not in MONTH_NAMES:
        raise FormatError(f"Unknown month: {month!r}")

    try:
        value = datetime(
            int(match["year"]),
            MONTH_NAMES.index(month) + 1,
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"] or 0),
            tzinfo=_parse_offset(match["offset"]),
        )
    except ValueError as e:
        raise FormatError(f"Invalid date {text!r}: {e}") from e

    weekday = match["weekday"]
    if weekday is not None and weekday != DAY_NAMES[value.weekday()]:
        raise FormatError(f"Day of week {weekday!r} does not match {text!r}")
    return value


def check_offset(offset: timedelta | None) -> timedelta:
    """Ensure ``offset`` is expressible as ``+HHMM``.

    Raises:
        ValidationError: If there is no offset, or it has a seconds component
            (local mean time zones before standardisation do).
    """
    if offset is None:
        raise ValidationError("Dates must carry a UTC offset")
    if offset % timedelta(minutes=1):
        raise ValidationError(f"UTC offset {offset} is not a whole number of minutes")
    return offset


def format_offset(offset: timedelta) -> str:
    if not offset:
        return "GMT"
    sign = "-" if offset < timedelta(0) else "+"
    hours, minutes = divmod(abs(offset) // timedelta(minutes=1), 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def encode(value: datetime) -> str:
    """Render an aware datetime in RFC 1123 form.

    Raises:
        ValidationError: If the datetime carries no UTC offset, or one with
            a seconds component.
    """
    offset = check_offset(require(value, "value").utcoffset())
    return (
        f"{DAY_NAMES[value.weekday()]}, {value.day} {MONTH_NAMES[value.month - 1]} "
        f"{value.year:04d} {value.hour:02d}:{value.minute:02d}:{value.second:02d} "
        f"{format_offset(offset)}"
    )
