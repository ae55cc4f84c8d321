"""Time utilities for parsing and converting timestamps."""

from .time import (
    InvalidTimeFormatError,
    TimeParseError,
    format_nanosecond_timestamp,
    parse_duration_offset,
    parse_rfc3339,
    parse_time,
    to_epoch_seconds,
)

__all__ = [
    "InvalidTimeFormatError",
    "TimeParseError",
    "format_nanosecond_timestamp",
    "parse_duration_offset",
    "parse_rfc3339",
    "parse_time",
    "to_epoch_seconds",
]
