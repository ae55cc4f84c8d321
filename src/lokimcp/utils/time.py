"""Time parsing and conversion utilities for Loki timestamps."""

import math
import re
from datetime import UTC, datetime, timedelta

import pendulum
from dateutil import parser as dateutil_parser


class TimeParseError(ValueError):
    """Raised when time parsing fails."""

    pass


class InvalidTimeFormatError(TimeParseError):
    """Raised when a time expression matches none of the supported formats."""

    def __init__(self, value: str, field: str | None = None) -> None:
        self.value = value
        self.field = field
        message = f"unsupported time format: {value}"
        if field:
            message = f"invalid {field} time: {message}"
        super().__init__(message)


NANOSECONDS_PER_SECOND = 1_000_000_000

# Go-style duration units, in seconds
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"^-(?:{_DURATION_PART})+$")
_DURATION_PART_RE = re.compile(_DURATION_PART)

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)

# Tried in order after RFC 3339; all are interpreted as UTC
FALLBACK_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


def parse_duration_offset(duration_str: str) -> timedelta | None:
    """
    Parse a negative Go-style duration such as '-1h', '-30m' or '-1h30m'.

    Args:
        duration_str: Duration string starting with '-'

    Returns:
        Negative timedelta, or None if the string is not a valid duration
    """
    if not _DURATION_RE.match(duration_str):
        return None

    seconds = 0.0
    for amount, unit in _DURATION_PART_RE.findall(duration_str):
        seconds += float(amount) * _DURATION_UNITS[unit]
    return -timedelta(seconds=seconds)


def parse_rfc3339(rfc_str: str) -> datetime | None:
    """
    Parse an RFC 3339 timestamp that carries an explicit zone.

    Returns:
        datetime in UTC, or None if the string is not RFC 3339
    """
    if not _RFC3339_RE.match(rfc_str):
        return None

    try:
        dt = pendulum.parse(rfc_str, strict=True)
        if isinstance(dt, pendulum.DateTime):
            return datetime.fromtimestamp(dt.timestamp(), tz=UTC)
    except ValueError:
        pass

    # Fallback to dateutil parser
    try:
        return dateutil_parser.isoparse(rfc_str).astimezone(UTC)
    except ValueError:
        return None


def parse_time(time_str: str) -> datetime:
    """
    Parse a time expression into a UTC datetime.

    Resolution order (first match wins):
    - 'now'
    - relative offsets starting with '-' ('-1h', '-30m', '-1h30m')
    - RFC 3339 with zone ('2024-01-15T10:30:45Z')
    - '2024-01-15T10:30:45', '2024-01-15 10:30:45', '2024-01-15' (UTC)

    An invalid relative offset falls through to the absolute formats.

    Args:
        time_str: Time expression

    Returns:
        datetime object in UTC

    Raises:
        InvalidTimeFormatError: If no format matches
    """
    now = datetime.now(UTC)

    if time_str == "now":
        return now

    if time_str.startswith("-"):
        offset = parse_duration_offset(time_str)
        if offset is not None:
            return now + offset

    parsed = parse_rfc3339(time_str)
    if parsed is not None:
        return parsed

    for fmt in FALLBACK_FORMATS:
        try:
            return datetime.strptime(time_str, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    raise InvalidTimeFormatError(time_str)


def to_epoch_seconds(dt: datetime) -> int:
    """Convert a datetime to whole seconds since the epoch (naive means UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return math.floor(dt.timestamp())


def format_nanosecond_timestamp(raw: object) -> str:
    """
    Render a Loki timestamp as RFC 3339 (UTC, second precision).

    The value is always treated as nanoseconds since the epoch, including the
    second-resolution timestamps of metric queries. Anything that does not
    parse as a number, or falls outside the representable range, is returned
    verbatim.

    Args:
        raw: Timestamp as sent by Loki, usually a string of digits

    Returns:
        Formatted timestamp, e.g. '2024-01-15T10:30:45Z'
    """
    text = str(raw)
    try:
        nanos = int(text)
    except ValueError:
        try:
            nanos = int(float(text))
        except (ValueError, OverflowError):
            return text

    try:
        dt = datetime.fromtimestamp(nanos // NANOSECONDS_PER_SECOND, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return text
    return dt.isoformat().replace("+00:00", "Z")
