"""Loki API URL construction."""

from collections.abc import Callable
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlsplit, urlunsplit

from .base import InvalidBaseURLError

API_PREFIX = "loki/api/v1"


def _parse_base(base_url: str) -> SplitResult:
    shown = strip_credentials(base_url)
    try:
        parts = urlsplit(base_url)
        # Port is only validated on access
        _ = parts.port
    except ValueError as e:
        raise InvalidBaseURLError(shown, str(e)) from e

    if parts.scheme not in ("http", "https"):
        raise InvalidBaseURLError(shown, "scheme must be http or https")
    if not parts.hostname:
        raise InvalidBaseURLError(shown, "missing host")
    return parts


def _api_path(path: str, operation: str, has_operation: Callable[[str], bool]) -> str:
    """
    Append the API path to a base path without duplicating segments.

    A base that does not mention the API prefix gets '/loki/api/v1/<operation>'.
    A base that already points into the API only gets the operation, and only
    when it is not there yet.
    """
    if API_PREFIX not in path:
        return f"{path.rstrip('/')}/{API_PREFIX}/{operation}"
    if has_operation(path):
        return path
    return f"{path.rstrip('/')}/{operation}"


def strip_credentials(url: str) -> str:
    """Drop a 'user:password@' part from a URL, leaving anything unparsable as is."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if "@" not in parts.netloc:
        return url
    return urlunsplit(parts._replace(netloc=parts.netloc.rsplit("@", 1)[1]))


def _build(
    base_url: str,
    operation: str,
    has_operation: Callable[[str], bool],
    params: dict[str, str],
) -> str:
    parts = _parse_base(base_url)
    path = _api_path(parts.path, operation, has_operation)

    # Set rather than append, so repeated builds are deterministic
    query = {k: v for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params}
    query.update(params)
    encoded = urlencode(sorted(query.items()))

    # Credentials never travel in the URL; auth is chosen by the data source
    netloc = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit((parts.scheme, netloc, path, encoded, parts.fragment))


def build_query_range_url(base_url: str, query: str, start: int, end: int, limit: int) -> str:
    """
    Build the URL for a LogQL range query.

    Args:
        base_url: Loki base URL, optionally already pointing into the API
        query: LogQL query string
        start: Start of the range, epoch seconds
        end: End of the range, epoch seconds
        limit: Maximum number of entries

    Returns:
        Full request URL

    Raises:
        InvalidBaseURLError: If the base URL cannot be parsed
    """
    return _build(
        base_url,
        "query_range",
        lambda path: path.endswith("query_range"),
        {"query": query, "start": str(start), "end": str(end), "limit": str(limit)},
    )


def build_labels_url(base_url: str, start: int, end: int) -> str:
    """Build the URL listing label names between start and end (epoch seconds)."""
    return _build(
        base_url,
        "labels",
        lambda path: path.endswith("labels"),
        {"start": str(start), "end": str(end)},
    )


def build_label_values_url(base_url: str, label: str, start: int, end: int) -> str:
    """Build the URL listing the values of one label; the name is path-escaped."""
    return _build(
        base_url,
        f"label/{quote(label, safe='')}/values",
        lambda path: "/label/" in path,
        {"start": str(start), "end": str(end)},
    )
