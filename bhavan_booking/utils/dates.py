"""Date handling for the booking API.

The server only understands ``DD-MM-YYYY``. Calendars and ISO tooling hand
us ``YYYY-MM-DD``; both are accepted and converted before any request.
"""

import re
from datetime import date, datetime
from typing import Union

from bhavan_booking.exceptions import ValidationError

API_DATE_FORMAT = "%d-%m-%Y"

DMY_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
YMD_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

DateInput = Union[str, date]


def _invalid(value, field_name: str) -> ValidationError:
    return ValidationError(
        {field_name: f"Invalid date {value!r}. Expected DD-MM-YYYY or YYYY-MM-DD"},
        message="Invalid date format. Expected DD-MM-YYYY",
    )


def parse_date(value: DateInput, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip() if isinstance(value, str) else ""

    match = DMY_PATTERN.match(text)
    if match:
        day, month, year = (int(p) for p in match.groups())
    else:
        match = YMD_PATTERN.match(text)
        if not match:
            raise _invalid(value, field_name)
        year, month, day = (int(p) for p in match.groups())

    try:
        return date(year, month, day)
    except ValueError:
        raise _invalid(value, field_name)


def to_api_date(value: DateInput, field_name: str = "date") -> str:
    """
    Normalize a date for transmission.

    A string already in day-month-year form is sent unchanged; year-month-day
    strings and ``date`` objects are converted to ``DD-MM-YYYY``.
    """
    if isinstance(value, str) and DMY_PATTERN.match(value.strip()):
        parse_date(value, field_name)
        return value.strip()
    return parse_date(value, field_name).strftime(API_DATE_FORMAT)


def format_display(value: DateInput) -> str:
    """``Mon, Jan 5`` style label. Falls back to the input on bad data."""
    if not value:
        return ""
    try:
        d = parse_date(value)
    except ValidationError:
        return str(value)
    return f"{d:%a}, {d:%b} {d.day}"


def nights_between(check_in: DateInput, check_out: DateInput) -> int:
    return (parse_date(check_out, "checkOutDate") - parse_date(check_in, "checkInDate")).days
