"""Rendering of Loki responses as raw, json or text output."""

import json
from collections.abc import Callable
from enum import Enum
from typing import Any

from lokimcp.providers.datasources.models import LokiEnvelope, SeriesEntry
from lokimcp.utils.time import format_nanosecond_timestamp


class UnsupportedFormatError(ValueError):
    """Raised when an output format other than raw, json or text is requested."""

    def __init__(self, value: str) -> None:
        self.value = value
        supported = ", ".join(f.value for f in OutputFormat)
        super().__init__(f"unsupported format: {value}. Supported formats: {supported}")


class OutputFormat(Enum):
    """Output representation of a tool result."""

    RAW = "raw"
    JSON = "json"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """
        Look up a format by name.

        Raises:
            UnsupportedFormatError: If the name is not a known format
        """
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFormatError(value) from None


class PayloadKind(Enum):
    """Shape of the payload returned by a Loki endpoint."""

    SERIES = "series"
    LABEL_NAMES = "label_names"
    LABEL_VALUES = "label_values"


def format_value(value: Any) -> str:
    """Render a sample value; integral floats lose their trailing '.0'."""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None or isinstance(value, (bool, dict, list)):
        return json.dumps(value)
    return str(value)


def format_labels(labels: dict[str, str], separator: str = ",") -> str:
    """Render a label set as 'k=v' pairs sorted by key."""
    return separator.join(f"{k}={v}" for k, v in sorted(labels.items()))


def _empty_message(kind: PayloadKind, label: str | None) -> str:
    if kind is PayloadKind.SERIES:
        return "No logs found matching the query"
    if kind is PayloadKind.LABEL_NAMES:
        return "No labels found"
    return f"No values found for label '{label}'"


def _render_json(envelope: LokiEnvelope, label: str | None) -> str:
    return json.dumps(envelope.raw, indent=2, ensure_ascii=False)


def _render_series_raw(envelope: LokiEnvelope, label: str | None) -> str:
    lines: list[str] = []
    for entry in envelope.series:
        prefix = f"{{{format_labels(entry.labels)}}} " if entry.labels else ""
        for ts, value in entry.samples():
            lines.append(f"{format_nanosecond_timestamp(ts)} {prefix}{format_value(value)}\n")
    return "".join(lines)


def _render_series_text(envelope: LokiEnvelope, label: str | None) -> str:
    series: list[SeriesEntry] = envelope.series
    output = [f"Found {len(series)} streams:\n\n"]

    for i, entry in enumerate(series, start=1):
        if entry.labels:
            output.append(f"Stream ({format_labels(entry.labels, ', ')}) {i}:\n")
        else:
            output.append(f"Stream {i}:\n")
        for ts, value in entry.samples():
            output.append(f"[{format_nanosecond_timestamp(ts)}] {format_value(value)}\n")
        output.append("\n")
    return "".join(output)


def _render_list_raw(envelope: LokiEnvelope, label: str | None) -> str:
    return "".join(f"{item}\n" for item in envelope.items)


def _render_label_names_text(envelope: LokiEnvelope, label: str | None) -> str:
    items = envelope.items
    output = [f"Found {len(items)} labels:\n\n"]
    output.extend(f"{i}. {item}\n" for i, item in enumerate(items, start=1))
    return "".join(output)


def _render_label_values_text(envelope: LokiEnvelope, label: str | None) -> str:
    items = envelope.items
    output = [f"Found {len(items)} values for label '{label}':\n\n"]
    output.extend(f"{i}. {item}\n" for i, item in enumerate(items, start=1))
    return "".join(output)


Renderer = Callable[[LokiEnvelope, str | None], str]

_RENDERERS: dict[tuple[PayloadKind, OutputFormat], Renderer] = {
    (PayloadKind.SERIES, OutputFormat.RAW): _render_series_raw,
    (PayloadKind.SERIES, OutputFormat.JSON): _render_json,
    (PayloadKind.SERIES, OutputFormat.TEXT): _render_series_text,
    (PayloadKind.LABEL_NAMES, OutputFormat.RAW): _render_list_raw,
    (PayloadKind.LABEL_NAMES, OutputFormat.JSON): _render_json,
    (PayloadKind.LABEL_NAMES, OutputFormat.TEXT): _render_label_names_text,
    (PayloadKind.LABEL_VALUES, OutputFormat.RAW): _render_list_raw,
    (PayloadKind.LABEL_VALUES, OutputFormat.JSON): _render_json,
    (PayloadKind.LABEL_VALUES, OutputFormat.TEXT): _render_label_values_text,
}


def format_result(
    envelope: LokiEnvelope,
    kind: PayloadKind,
    output_format: OutputFormat | str,
    label: str | None = None,
) -> str:
    """
    Render a decoded Loki envelope.

    An empty payload short-circuits every format to a fixed message (wrapped
    in a one-field JSON object for the json format).

    Args:
        envelope: Decoded Loki response
        kind: Payload shape the envelope came from
        output_format: raw, json or text
        label: Label name, used in label-values messages

    Returns:
        Rendered output

    Raises:
        UnsupportedFormatError: If output_format is not a known format
    """
    if not isinstance(output_format, OutputFormat):
        output_format = OutputFormat.parse(output_format)

    if envelope.is_empty:
        message = _empty_message(kind, label)
        if output_format is OutputFormat.JSON:
            return json.dumps({"message": message}, ensure_ascii=False)
        return message

    return _RENDERERS[(kind, output_format)](envelope, label)
