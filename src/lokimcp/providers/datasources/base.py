"""Exceptions raised while talking to the Loki backend."""


class DataSourceError(Exception):
    """Base exception for data source errors."""

    pass


class InvalidBaseURLError(DataSourceError):
    """Raised when the configured Loki URL cannot be used as a request base."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"invalid Loki URL '{url}': {reason}")


class BackendHTTPError(DataSourceError):
    """Raised when Loki answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP error: {status_code} - {body}")


class BackendReportedError(DataSourceError):
    """Raised when Loki answers 2xx but the envelope reports status 'error'."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"loki error: {message}")


class BackendDecodeError(DataSourceError):
    """Raised when the response body is not a Loki JSON envelope."""

    pass


class BackendTimeoutError(DataSourceError):
    """Raised when the request exceeds the client timeout."""

    pass


class BackendConnectionError(DataSourceError):
    """Raised when the request fails at the transport level."""

    pass
