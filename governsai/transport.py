"""
GovernsAI SDK - HTTP transport.

Thin mapping between ``httpx`` and the SDK error taxonomy: a 2xx yields the
parsed JSON body, anything else raises a classified ``GovernsAIError``.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

import httpx

from .config import GovernsAIConfig
from .exceptions import TransportError, TransportErrorKind, error_from_response

logger = logging.getLogger("governsai.transport")

USER_AGENT = "governsai-python"


@dataclass
class HTTPResponse:
    """Status, reason, parsed body and headers of a completed request."""

    status: int
    status_text: str = ""
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "HTTPResponse":
        return cls(
            status=response.status_code,
            status_text=response.reason_phrase,
            data=_parse_body(response),
            headers=dict(response.headers),
        )


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return {} if 200 <= response.status_code < 300 else None
    try:
        return response.json()
    except ValueError:
        return None


def _classify_transport_failure(error: httpx.HTTPError) -> TransportErrorKind:
    if isinstance(error, httpx.TimeoutException):
        return TransportErrorKind.TIMEOUT
    if isinstance(error, httpx.ConnectError):
        text = str(error).lower()
        if "name or service not known" in text or "nodename nor servname" in text or (
            "getaddrinfo" in text
        ):
            return TransportErrorKind.DNS
        return TransportErrorKind.CONNECTION
    if isinstance(error, httpx.NetworkError):
        return TransportErrorKind.CONNECTION
    if isinstance(error, httpx.ProtocolError):
        return TransportErrorKind.PROTOCOL
    return TransportErrorKind.UNKNOWN


def build_headers(config: GovernsAIConfig) -> dict[str, str]:
    return {
        "X-Governs-Key": config.api_key,
        "X-Org-ID": config.org_id,
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


class AsyncHTTPTransport:
    """
    Asynchronous HTTP transport bound to one configuration snapshot.

    Example:
        ```python
        async with AsyncHTTPTransport(config) as http:
            policies = await http.get("/api/v1/policies")
        ```
    """

    def __init__(
        self,
        config: GovernsAIConfig,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.base_url = (base_url or config.base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=build_headers(config),
            timeout=config.timeout_seconds,
            transport=transport,
        )
        self._in_flight = 0
        self._retired = False

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    @property
    def idle(self) -> bool:
        return self._in_flight == 0

    @asynccontextmanager
    async def lease(self) -> AsyncIterator["AsyncHTTPTransport"]:
        """Keep the transport open across one call, retries included."""
        self._in_flight += 1
        try:
            yield self
        finally:
            self._in_flight -= 1
            if self._retired and not self._in_flight:
                await self.aclose()

    def retire(self) -> None:
        """Mark for closing; the last lease to finish closes the client."""
        self._retired = True

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the parsed body of a 2xx response."""
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if files is not None:
            kwargs["files"] = files
            kwargs["data"] = data or {}
        elif body is not None:
            kwargs["json"] = body

        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            async with self.lease():
                response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            kind = _classify_transport_failure(e)
            raise TransportError(str(e) or f"{type(e).__name__} during {method} {path}", kind) from e

        result = HTTPResponse.from_httpx(response)
        if not result.ok:
            raise error_from_response(result)
        return result.data

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, body: Any = None, params: Optional[dict[str, Any]] = None
    ) -> Any:
        return await self.request("POST", path, body=body, params=params)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    async def post_form(
        self, path: str, data: dict[str, Any], files: dict[str, Any]
    ) -> Any:
        return await self.request("POST", path, data=data, files=files)

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
