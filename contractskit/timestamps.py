"""ISO 8601 timestamps in the canonical contract form.

Contracts exchange timestamps as ``YYYY-MM-DDTHH:MM:SS[.mmm]Z`` (UTC,
millisecond precision at most). ``format_timestamp`` always emits the
millisecond form so ``parse_timestamp(format_timestamp(dt)) == dt`` for any
millisecond-aligned UTC datetime.
"""
import re
from datetime import datetime, timezone
from typing import Optional

ISO_DATETIME_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{3}))?Z$"
)


def now_utc() -> datetime:
    """Current UTC time truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return format_timestamp(now_utc())


def parse_timestamp(text: str) -> datetime:
    """Parse a canonical timestamp into an aware UTC datetime.

    Raises:
        ValueError: if the text does not match the canonical pattern or
            names an impossible date (e.g. February 30th).
    """
    match = ISO_DATETIME_PATTERN.fullmatch(text) if isinstance(text, str) else None
    if not match:
        raise ValueError(f"Invalid ISO 8601 timestamp: {text!r}")
    year, month, day, hour, minute, second, millis = match.groups()
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second),
        int(millis or 0) * 1000,
        tzinfo=timezone.utc,
    )


def try_parse_timestamp(text: str) -> Optional[datetime]:
    try:
        return parse_timestamp(text)
    except ValueError:
        return None
