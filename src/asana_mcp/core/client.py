"""
HTTP client for the Asana REST API.

Each call opens a short-lived ``httpx.AsyncClient``, sends one request with
the bearer token, and decodes Asana's ``{"data": ...}`` envelope with
pydantic. Failures surface as the ``AsanaError`` hierarchy:

    404                      -> NotFoundError
    other non-2xx            -> RemoteApiError
    connect/timeout/protocol -> TransportError
    body not the envelope    -> ParseError

There are no retries; every failure propagates to the caller unchanged.

Example:
    client = AsanaClient(token)
    project = await client.get("/projects/123", [("opt_fields", PROJECT_FIELDS)])
    tasks = await client.get_all("/tasks", [("project", "123")])
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from asana_mcp.config.loader import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from asana_mcp.config.server import ServerConfig
from asana_mcp.core.errors.asana import NotFoundError, ParseError, RemoteApiError, TransportError
from asana_mcp.core.models import DataEnvelope, ListEnvelope, Resource
from asana_mcp.core.observability import get_metrics, redact_sensitive_data

logger = logging.getLogger(__name__)

T = TypeVar("T")

Query = Sequence[Tuple[str, str]]

NOT_FOUND_FALLBACK = "resource not found"


class _ErrorDetail(BaseModel):
    message: str


class _ErrorBody(BaseModel):
    errors: List[_ErrorDetail]


def extract_error_message(body: str) -> Optional[str]:
    """Return ``errors[0].message`` from an Asana error body, if well-formed."""
    try:
        parsed = _ErrorBody.model_validate_json(body)
    except ValidationError:
        return None
    if not parsed.errors:
        return None
    return parsed.errors[0].message


class AsanaClient:
    """Async Asana API client with envelope decoding and pagination.

    The client holds only immutable configuration (token, base URL, timeout)
    and is safe to share between concurrent tool calls.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: ServerConfig) -> "AsanaClient":
        """Build a client from server configuration.

        Raises:
            ConfigurationError: If the token is missing or malformed.
        """
        return cls(
            config.require_token(),
            base_url=config.base_url,
            timeout=config.request_timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"AsanaClient(base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, path: str, params: Query = (), *, model: Type[T] = Resource) -> T:  # type: ignore[assignment]
        """GET a single object and return the decoded ``data``."""
        response = await self._send("GET", path, params=params)
        return self._decode(response, DataEnvelope[model]).data  # type: ignore[valid-type]

    async def get_list(self, path: str, params: Query = (), *, model: Type[T] = Resource) -> ListEnvelope[T]:  # type: ignore[assignment]
        """GET one page of a list endpoint, cursor included."""
        response = await self._send("GET", path, params=params)
        return self._decode(response, ListEnvelope[model])  # type: ignore[valid-type]

    async def get_all(self, path: str, params: Query = (), *, model: Type[T] = Resource) -> List[T]:  # type: ignore[assignment]
        """GET every page of a list endpoint, concatenated in arrival order.

        The caller's query is sent unchanged on the first request; each later
        request appends ``("offset", cursor)`` to a copy of it. Any failing
        page aborts the whole call.
        """
        items: List[T] = []
        offset: Optional[str] = None
        pages = 0

        while True:
            query = list(params)
            if offset is not None:
                query.append(("offset", offset))

            page = await self.get_list(path, query, model=model)
            pages += 1
            items.extend(page.data)

            if page.next_page is None:
                break
            offset = page.next_page.offset

        logger.debug("Fetched %d item(s) from %s in %d page(s)", len(items), path, pages)
        return items

    async def post(self, path: str, body: Dict[str, Any], *, model: Type[T] = Resource) -> T:  # type: ignore[assignment]
        """POST a body and return the decoded ``data``."""
        response = await self._send("POST", path, body=body)
        return self._decode(response, DataEnvelope[model]).data  # type: ignore[valid-type]

    async def put(self, path: str, body: Dict[str, Any], *, model: Type[T] = Resource) -> T:  # type: ignore[assignment]
        """PUT a body and return the decoded ``data``."""
        response = await self._send("PUT", path, body=body)
        return self._decode(response, DataEnvelope[model]).data  # type: ignore[valid-type]

    async def post_empty(self, path: str, body: Dict[str, Any]) -> None:
        """POST to a relationship endpoint; a 2xx body is ignored."""
        await self._send("POST", path, body=body)

    async def delete(self, path: str) -> None:
        await self._send("DELETE", path)

    async def delete_with_body(self, path: str, body: Dict[str, Any]) -> None:
        await self._send("DELETE", path, body=body)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Query = (),
        body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request and raise for any non-2xx status."""
        url = f"{self._base_url}{path}"
        metrics = get_metrics()
        start = time.perf_counter()
        status = "transport_error"

        logger.debug("%s %s", method, path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=list(params),
                    json=body,
                    headers=self._headers,
                )
        except httpx.HTTPError as exc:
            message = redact_sensitive_data(str(exc)) or type(exc).__name__
            logger.warning("%s %s failed: %s", method, path, message)
            raise TransportError(message, original_error=exc) from exc
        else:
            status = str(response.status_code)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            metrics.counter("asana.requests", labels={"method": method, "status": status})
            metrics.timer("asana.latency", duration_ms, labels={"method": method})

        if not 200 <= response.status_code < 300:
            raise self._error_from_response(response)
        return response

    @staticmethod
    def _error_from_response(response: httpx.Response) -> Exception:
        message = extract_error_message(response.text)
        if response.status_code == 404:
            return NotFoundError(message or NOT_FOUND_FALLBACK)
        if message is None:
            message = f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip()
        logger.debug("Asana API error %s: %s", response.status_code, redact_sensitive_data(message))
        return RemoteApiError(message, status_code=response.status_code)

    @staticmethod
    def _decode(response: httpx.Response, envelope: Type[BaseModel]) -> Any:
        try:
            return envelope.model_validate_json(response.text)
        except ValidationError as exc:
            raise ParseError(_summarize_validation_error(exc)) from exc


def _summarize_validation_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid value')}"


__all__ = [
    "AsanaClient",
    "NOT_FOUND_FALLBACK",
    "Query",
    "extract_error_message",
]
