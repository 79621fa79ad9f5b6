"""
Dive datetime parsing and formatting.

Clients send local wall-clock times ("2024-03-01T10:15:00", sometimes with a
trailing "Z" that carries no meaning here). Values are stored timezone-naive
and returned without an offset, so a dive logged at 10:15 stays 10:15
whatever the server's timezone.
"""

import logging
from datetime import datetime

from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)

LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _trim_fraction(value: str) -> str:
    # strptime's %f takes at most six digits; nanosecond input is truncated.
    head, sep, fraction = value.partition(".")
    if sep and len(fraction) > 6 and fraction.isdigit():
        return f"{head}.{fraction[:6]}"
    return value


def parse_datetime(value: str, strict: bool = False) -> datetime:
    """
    Parse a client-supplied dive datetime into a naive datetime.

    A single trailing "Z" is stripped without applying any offset; no other
    characters are removed, so surrounding whitespace makes a value
    unparseable. The formats in DATETIME_FORMATS are tried in order; a
    date-only value parses to midnight.

    When nothing matches, the current local time is returned, unless
    `strict` is set, in which case a ValidationError is raised.
    """
    candidate = value or ""
    if candidate.endswith("Z"):
        candidate = candidate[:-1]
    candidate = _trim_fraction(candidate)

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(candidate, fmt)
        except ValueError:
            continue

    if strict:
        raise ValidationError(
            message=f"Invalid datetime '{value}'. Expected YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS",
            field="datetime",
        )
    logger.warning("Unparseable dive datetime %r, falling back to current time", value)
    return datetime.now()


def format_local_datetime(value: datetime) -> str:
    """Render a datetime as YYYY-MM-DDTHH:MM:SS with no timezone designator."""
    return value.strftime(LOCAL_DATETIME_FORMAT)
