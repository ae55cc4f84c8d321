"""Loki response envelope models."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SeriesEntry:
    """
    One entry of a series payload.

    Log queries carry their label set under 'stream', metric queries under
    'metric'. Values are [timestamp, value] pairs; the value is a log line for
    log queries and a number (or numeric string) for metric queries.
    """

    labels: dict[str, str] = field(default_factory=dict)
    values: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SeriesEntry":
        """Create a SeriesEntry from one element of data.result."""
        labels = data.get("stream") or data.get("metric") or {}
        values = data.get("values")
        if values is None and data.get("value") is not None:
            # Instant vectors carry a single sample
            values = [data["value"]]
        return cls(labels=dict(labels), values=list(values or []))

    def samples(self) -> Iterator[tuple[Any, Any]]:
        """Yield (timestamp, value) pairs, skipping malformed ones."""
        for pair in self.values:
            if isinstance(pair, (list, tuple)) and len(pair) >= 2:
                yield pair[0], pair[1]


@dataclass
class LokiEnvelope:
    """Decoded Loki JSON response: {status, error?, data}."""

    status: str
    data: Any = None
    error: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "LokiEnvelope":
        """Create an envelope from the decoded response body."""
        return cls(
            status=str(raw.get("status", "")),
            data=raw.get("data"),
            error=raw.get("error"),
            raw=raw,
        )

    @property
    def result_type(self) -> str | None:
        """Get data.resultType for series payloads ('streams', 'matrix', ...)."""
        if isinstance(self.data, dict):
            return self.data.get("resultType")
        return None

    @property
    def series(self) -> list[SeriesEntry]:
        """Get the entries of a series payload (empty for flat lists)."""
        if not isinstance(self.data, dict):
            return []
        return [
            SeriesEntry.from_dict(entry)
            for entry in self.data.get("result") or []
            if isinstance(entry, dict)
        ]

    @property
    def items(self) -> list[str]:
        """Get the strings of a flat list payload (empty for series)."""
        if not isinstance(self.data, list):
            return []
        return [str(item) for item in self.data]

    @property
    def is_empty(self) -> bool:
        """Check whether the payload holds no entries."""
        if isinstance(self.data, list):
            return not self.data
        if isinstance(self.data, dict):
            return not self.data.get("result")
        return True
