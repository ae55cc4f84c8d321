"""Resolution of tool arguments into typed Loki requests."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import unquote, urlsplit

from lokimcp.config.settings import LokiSettings
from lokimcp.core.formatting import OutputFormat
from lokimcp.utils.time import InvalidTimeFormatError, parse_time

DEFAULT_LIMIT = 100
DEFAULT_WINDOW = timedelta(hours=1)


class ToolArgumentError(ValueError):
    """Base exception for unusable tool arguments."""

    pass


class MissingRequiredParameterError(ToolArgumentError):
    """Raised when a required argument is absent or empty."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"missing required parameter: {name}")


class InvalidParameterError(ToolArgumentError):
    """Raised when an argument has a type or value that cannot be converted."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"invalid {name}: {reason}")


@dataclass(frozen=True, kw_only=True)
class LokiRequest:
    """Connection, authentication, time window and output format of one call."""

    url: str
    start: datetime
    end: datetime
    org_id: str | None = None
    username: str | None = None
    password: str | None = None
    token: str | None = None
    output_format: OutputFormat = OutputFormat.RAW

    @property
    def uses_bearer_token(self) -> bool:
        """A token wins over username/password when both are present."""
        return bool(self.token)

    @property
    def uses_basic_auth(self) -> bool:
        """Basic auth applies when there is no token but a username or password."""
        return not self.token and bool(self.username or self.password)


@dataclass(frozen=True, kw_only=True)
class QueryRequest(LokiRequest):
    """A LogQL range query."""

    query: str
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True, kw_only=True)
class LabelNamesRequest(LokiRequest):
    """A label name listing."""

    pass


@dataclass(frozen=True, kw_only=True)
class LabelValuesRequest(LokiRequest):
    """A listing of the values of one label."""

    label: str


class ParameterResolver:
    """
    Merge tool arguments with environment defaults.

    Each field resolves to the explicit non-empty argument, then the value from
    the injected settings, then a static fallback. Empty strings count as
    absent.
    """

    def __init__(self, settings: LokiSettings) -> None:
        """
        Initialize the resolver.

        Args:
            settings: Environment-sourced defaults
        """
        self.settings = settings

    def resolve_query(self, args: Mapping[str, Any]) -> QueryRequest:
        """
        Resolve loki_query arguments.

        Raises:
            MissingRequiredParameterError: If 'query' is absent
            InvalidParameterError: If an argument cannot be converted
            InvalidTimeFormatError: If 'start' or 'end' cannot be parsed
            UnsupportedFormatError: If 'format' is unknown
        """
        query = self._required(args, "query")
        return QueryRequest(**self._common(args), query=query, limit=self._limit(args))

    def resolve_label_names(self, args: Mapping[str, Any]) -> LabelNamesRequest:
        """Resolve loki_label_names arguments."""
        return LabelNamesRequest(**self._common(args))

    def resolve_label_values(self, args: Mapping[str, Any]) -> LabelValuesRequest:
        """Resolve loki_label_values arguments; 'label' is required."""
        label = self._required(args, "label")
        return LabelValuesRequest(**self._common(args), label=label)

    def _common(self, args: Mapping[str, Any]) -> dict[str, Any]:
        now = datetime.now(UTC)
        url = self._string(args, "url") or self.settings.effective_url
        url_username, url_password = _url_credentials(url)
        return {
            "url": url,
            "start": self._time(args, "start", now - DEFAULT_WINDOW),
            "end": self._time(args, "end", now),
            "org_id": self._string(args, "org") or self.settings.org_id,
            "username": self._string(args, "username") or self.settings.username or url_username,
            "password": self._string(args, "password") or self.settings.password or url_password,
            "token": self._string(args, "token") or self.settings.token,
            "output_format": OutputFormat.parse(self._string(args, "format") or "raw"),
        }

    @staticmethod
    def _string(args: Mapping[str, Any], name: str) -> str | None:
        value = args.get(name)
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise InvalidParameterError(name, f"expected a string, got {type(value).__name__}")
        return value

    def _required(self, args: Mapping[str, Any], name: str) -> str:
        value = self._string(args, name)
        if value is None:
            raise MissingRequiredParameterError(name)
        return value

    def _time(self, args: Mapping[str, Any], name: str, default: datetime) -> datetime:
        value = self._string(args, name)
        if value is None:
            return default
        try:
            return parse_time(value)
        except InvalidTimeFormatError as e:
            raise InvalidTimeFormatError(value, field=name) from e

    @staticmethod
    def _limit(args: Mapping[str, Any]) -> int:
        value = args.get("limit")
        if value is None or value == "":
            return DEFAULT_LIMIT
        if isinstance(value, bool):
            raise InvalidParameterError("limit", "expected a number, got bool")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                raise InvalidParameterError("limit", f"not a number: {value!r}") from None
        if isinstance(value, float):
            if not math.isfinite(value):
                raise InvalidParameterError("limit", f"not a finite number: {value}")
            return math.trunc(value)
        raise InvalidParameterError("limit", f"expected a number, got {type(value).__name__}")


def _url_credentials(url: str) -> tuple[str | None, str | None]:
    """Extract 'user:password@' from a URL; the URL builder drops them from requests."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return None, None
    username = unquote(parts.username) if parts.username else None
    password = unquote(parts.password) if parts.password else None
    return username, password
