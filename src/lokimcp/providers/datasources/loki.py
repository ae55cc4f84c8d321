"""Grafana Loki HTTP API data source."""

import asyncio
import logging
from typing import Any

import httpx

from lokimcp.core.params import LabelNamesRequest, LabelValuesRequest, LokiRequest, QueryRequest
from lokimcp.utils.time import to_epoch_seconds

from .base import (
    BackendConnectionError,
    BackendDecodeError,
    BackendHTTPError,
    BackendReportedError,
    BackendTimeoutError,
)
from .models import LokiEnvelope
from .urls import build_label_values_url, build_labels_url, build_query_range_url

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0
ORG_ID_HEADER = "X-Scope-OrgID"


class LokiDataSource:
    """
    Loki HTTP API client.

    Every call is a single authenticated GET with a bounded timeout. Nothing
    is retried and no state is kept between calls.
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Loki data source.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout
        self._transport = transport

    async def query_range(self, request: QueryRequest) -> LokiEnvelope:
        """
        Run a LogQL range query.

        Args:
            request: Resolved query request

        Returns:
            Decoded envelope with a series payload

        Raises:
            InvalidBaseURLError: If the Loki URL cannot be used
            BackendHTTPError: If Loki answers with a non-2xx status
            BackendReportedError: If the envelope reports status 'error'
            BackendDecodeError: If the body is not a JSON envelope
            BackendTimeoutError: If the request times out
            BackendConnectionError: If the request fails at the transport level
        """
        url = build_query_range_url(
            request.url,
            request.query,
            to_epoch_seconds(request.start),
            to_epoch_seconds(request.end),
            request.limit,
        )
        return await self._get(url, request)

    async def label_names(self, request: LabelNamesRequest) -> LokiEnvelope:
        """List label names; raises the same errors as query_range."""
        url = build_labels_url(
            request.url, to_epoch_seconds(request.start), to_epoch_seconds(request.end)
        )
        return await self._get(url, request)

    async def label_values(self, request: LabelValuesRequest) -> LokiEnvelope:
        """List the values of request.label; raises the same errors as query_range."""
        url = build_label_values_url(
            request.url,
            request.label,
            to_epoch_seconds(request.start),
            to_epoch_seconds(request.end),
        )
        return await self._get(url, request)

    @staticmethod
    def _auth(request: LokiRequest) -> tuple[dict[str, str], httpx.Auth | None]:
        """Build headers and auth for a request; a bearer token wins over basic auth."""
        headers: dict[str, str] = {}
        auth: httpx.Auth | None = None

        if request.uses_bearer_token:
            headers["Authorization"] = f"Bearer {request.token}"
        elif request.uses_basic_auth:
            auth = httpx.BasicAuth(request.username or "", request.password or "")

        # Tenant header is independent of the auth method
        if request.org_id:
            headers[ORG_ID_HEADER] = request.org_id

        return headers, auth

    async def _get(self, url: str, request: LokiRequest) -> LokiEnvelope:
        headers, auth = self._auth(request)
        logger.debug(f"GET {url.split('?', 1)[0]}")

        try:
            # httpx times each phase separately; this bounds the whole exchange
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.get(url, headers=headers, auth=auth)
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Loki request timed out after {self.timeout}s")
            raise BackendTimeoutError(f"request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.warning(f"Loki request failed: {e}")
            raise BackendConnectionError(f"request failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Loki returned HTTP {response.status_code}")
            raise BackendHTTPError(response.status_code, response.text)

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> LokiEnvelope:
        try:
            payload: Any = response.json()
        except ValueError as e:
            raise BackendDecodeError(f"failed to decode Loki response: {e}") from e

        if not isinstance(payload, dict):
            raise BackendDecodeError(
                f"unexpected Loki response: expected a JSON object, got {type(payload).__name__}"
            )

        envelope = LokiEnvelope.from_dict(payload)
        if envelope.status == "error":
            raise BackendReportedError(envelope.error or "unknown error")
        return envelope
