"""Date and time helpers."""

import re
from datetime import date, datetime, timezone

# Sort key for episodes whose release date is missing or unparsable. This is
# a real date, so an episode genuinely released on 1970-01-01 ties with them.
EPOCH_DATE = date(1970, 1, 1)

_RELEASE_DATE_RE = re.compile(r"(\d{4})(?:-(\d{2})(?:-(\d{2})(?:T.*)?)?)?")


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Return today's calendar date in UTC."""
    return now_utc().date()


def parse_release_date(value: object) -> date | None:
    """Parse an upstream release date.

    Upstream dates come with year, month or day precision ("2023",
    "2023-04", "2023-04-05"); partial dates resolve to the first day of the
    period. A time component ("2023-04-05T10:00:00Z") is allowed after a
    full date and ignored; anything else makes the value invalid.

    Returns:
        The parsed date, or None when the value is missing or invalid
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _RELEASE_DATE_RE.fullmatch(value.strip())
    if not match:
        return None

    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None
