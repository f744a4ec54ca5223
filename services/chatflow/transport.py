"""HTTP transport used by the chatflow executor.

The executor only knows the ``Transport`` protocol: perform one request,
return the decoded body, or raise ``TransportError`` carrying an optional
status code and a message. ``HttpxTransport`` is the production
implementation; tests inject their own.
"""

import errno
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlparse

import httpx

from chatflow.allowlist import NetworkAllowList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    """Fully specified outbound request."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    json: Optional[Dict[str, Any]] = None


class TransportError(Exception):
    """Transport-level failure, with the HTTP status when one was received."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Transport(Protocol):
    async def fetch(self, request: HttpRequest) -> Any:
        ...


def _is_connection_refused(exc: BaseException) -> bool:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        current = current.__cause__ or current.__context__
    return "connection refused" in str(exc).lower()


def _upstream_message(response: httpx.Response) -> str:
    """Prefer the server's own message over the bare reason phrase."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error"):
            if data.get(key):
                return str(data[key])
    return response.reason_phrase or response.text or f"HTTP {response.status_code}"


class HttpxTransport:
    """Async transport over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_ms: int = 60000,
        allowlist: Optional[NetworkAllowList] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.timeout_seconds = timeout_ms / 1000
        self.allowlist = allowlist
        self._http = client or httpx.AsyncClient(timeout=self.timeout_seconds)

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self, request: HttpRequest) -> Dict[str, str]:
        headers = dict(request.headers)
        if self.api_key:
            token = self.api_key
            if not token.lower().startswith("bearer "):
                token = f"Bearer {token}"
            headers["Authorization"] = token
        return headers

    async def fetch(self, request: HttpRequest) -> Any:
        """
        Send *request* and return the decoded JSON body.

        A 2xx body that is not JSON is returned as text; deciding whether that
        is acceptable belongs to the caller.

        Raises:
            TransportError: On any non-2xx status or connection-level failure
        """
        if self.allowlist and not self.allowlist.allows_url(request.url):
            host = urlparse(request.url).hostname or request.url
            raise TransportError(f"Network domain {host} is not in the allowed domains")

        try:
            resp = await self._http.request(
                request.method,
                request.url,
                json=request.json,
                headers=self._headers(request),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                _upstream_message(e.response),
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request to {request.url} timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.ConnectError as e:
            if _is_connection_refused(e):
                raise TransportError(f"connect ECONNREFUSED {request.url}") from e
            raise TransportError(str(e) or type(e).__name__) from e
        except httpx.RequestError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            return resp.json()
        except ValueError:
            logger.warning("Non-JSON body from %s (%d bytes)", request.url, len(resp.content))
            return resp.text
