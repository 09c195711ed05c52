"""
Client Factory

Binds a base URL, default headers, default query and fixed request options
(auth, TLS client certificate, HMAC, retry) into a client with one explicit
method per HTTP verb.

Patterns Applied:
- Connection pooling (one httpx.AsyncClient per bound client)
- Repository Pattern: Protocol for duck typing, FakeRequestClient for tests
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from src.clients.request_handler import (
    DEFAULT_RETRY_DELAY,
    BasicAuth,
    HMACOptions,
    HttpMethod,
    RequestClientError,
    RequestOptions,
    SSLOptions,
    build_ssl_context,
    send_request,
)
from src.core.exceptions import ConfigurationError

# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True)
class ClientOptions:
    """Defaults bound into a RequestClient.

    Attributes:
        url: Base URL, concatenated with each route as-is
        headers: Default headers, per-call headers are layered on top
        query: Default query parameters, per-call query is layered on top
        auth: Basic auth credentials, fixed per client
        ssl: TLS client certificate, fixed per client
        hmac: HMAC signing config, fixed per client
        timeout: Default timeout in seconds, overridable per call
        retry: Retry count on transient failures, fixed per client
        retry_delay: Initial backoff delay in seconds
    """

    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    auth: BasicAuth | None = None
    ssl: SSLOptions | None = None
    hmac: HMACOptions | None = None
    timeout: float | None = None
    retry: int | None = None
    retry_delay: float = DEFAULT_RETRY_DELAY


# =============================================================================
# Protocol for Duck Typing (Repository Pattern)
# =============================================================================


class RequestClientProtocol(Protocol):
    """Protocol for RequestClient duck typing.

    Enables FakeRequestClient for testing without real HTTP calls.
    """

    async def get(
        self,
        route: str,
        *,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a GET request to route."""
        ...

    async def post(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a POST request to route."""
        ...

    async def put(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a PUT request to route."""
        ...

    async def delete(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a DELETE request to route."""
        ...

    async def patch(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a PATCH request to route."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...


# =============================================================================
# RequestClient Implementation
# =============================================================================


class RequestClient:
    """Bound HTTP client for one backend.

    Attributes:
        options: Defaults merged into every request
    """

    def __init__(
        self,
        options: ClientOptions,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the bound client.

        Args:
            options: Base URL, default headers/query and fixed request options
            http_client: Pooled client to reuse; one is created when omitted

        Raises:
            ConfigurationError: When options.ssl is combined with http_client,
                or the client certificate cannot be loaded
        """
        self.options = options

        if http_client is not None and options.ssl is not None:
            raise ConfigurationError(
                "A TLS client certificate cannot be applied to an existing http_client"
            )
        if http_client is None:
            verify: Any = build_ssl_context(options.ssl) if options.ssl else True
            http_client = httpx.AsyncClient(
                verify=verify,
                timeout=httpx.Timeout(None),
                follow_redirects=True,
            )
        self._client = http_client

    @property
    def base_url(self) -> str:
        return self.options.url

    async def __aenter__(self) -> RequestClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def build_options(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> RequestOptions:
        """Merge client defaults with per-call overrides into a descriptor.

        Args:
            route: Path appended to the base URL
            body: Request body, defaults to an empty object
            query: Per-call query, wins over default query on conflicts
            headers: Per-call headers, win over default headers on conflicts
            timeout: Per-call timeout, replaces the client default when set

        Returns:
            RequestOptions ready for send_request(). ssl is left unset: the
            pooled client already presents the certificate.
        """
        return RequestOptions(
            url=f"{self.options.url}{route}",
            headers={**self.options.headers, **(headers or {})},
            query={**self.options.query, **(query or {})},
            body=body if body is not None else {},
            auth=self.options.auth,
            hmac=self.options.hmac,
            timeout=timeout if timeout is not None else self.options.timeout,
            retry=self.options.retry,
            retry_delay=self.options.retry_delay,
        )

    async def _send(self, method: HttpMethod, route: str, **kwargs: Any) -> Any:
        options = self.build_options(route, **kwargs)
        return await send_request(method, options, http_client=self._client)

    async def get(
        self,
        route: str,
        *,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a GET request to route."""
        return await self._send(
            HttpMethod.GET, route, query=query, headers=headers, timeout=timeout
        )

    async def post(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a POST request to route."""
        return await self._send(
            HttpMethod.POST,
            route,
            body=body,
            query=query,
            headers=headers,
            timeout=timeout,
        )

    async def put(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a PUT request to route."""
        return await self._send(
            HttpMethod.PUT,
            route,
            body=body,
            query=query,
            headers=headers,
            timeout=timeout,
        )

    async def delete(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a DELETE request to route."""
        return await self._send(
            HttpMethod.DELETE,
            route,
            body=body,
            query=query,
            headers=headers,
            timeout=timeout,
        )

    async def patch(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a PATCH request to route."""
        return await self._send(
            HttpMethod.PATCH,
            route,
            body=body,
            query=query,
            headers=headers,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client connection pool."""
        await self._client.aclose()


def create_client(
    options: ClientOptions,
    http_client: httpx.AsyncClient | None = None,
) -> RequestClient:
    """Create a RequestClient bound to options."""
    return RequestClient(options, http_client=http_client)


# =============================================================================
# FakeRequestClient for Testing
# =============================================================================


@dataclass
class RecordedCall:
    """One call captured by FakeRequestClient."""

    method: HttpMethod
    route: str
    body: Any = None
    query: dict[str, Any] | None = None
    headers: dict[str, str] | None = None


class FakeRequestClient:
    """Fake client for unit testing without real HTTP.

    Implements RequestClientProtocol. Responses are keyed by (method, route);
    a response that is an exception instance is raised instead of returned.
    Unknown routes raise RequestClientError with status 404.
    """

    def __init__(
        self,
        responses: dict[tuple[str, str], Any] | None = None,
    ) -> None:
        self._responses: dict[tuple[str, str], Any] = dict(responses or {})
        self.calls: list[RecordedCall] = []
        self.closed = False

    def set_response(self, method: str, route: str, response: Any) -> None:
        self._responses[(method, route)] = response

    async def _send(
        self,
        method: HttpMethod,
        route: str,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        await asyncio.sleep(0)
        self.calls.append(RecordedCall(method, route, body, query, headers))
        try:
            response = self._responses[(method.value, route)]
        except KeyError:
            raise RequestClientError(
                f"No fake response for {method.value} {route}",
                status_code=404,
                request=f"{method.value.upper()} {route}",
            ) from None
        if isinstance(response, Exception):
            raise response
        return response

    async def get(
        self,
        route: str,
        *,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,  # noqa: ARG002
    ) -> Any:
        return await self._send(HttpMethod.GET, route, query=query, headers=headers)

    async def post(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,  # noqa: ARG002
    ) -> Any:
        return await self._send(HttpMethod.POST, route, body, query, headers)

    async def put(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,  # noqa: ARG002
    ) -> Any:
        return await self._send(HttpMethod.PUT, route, body, query, headers)

    async def delete(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,  # noqa: ARG002
    ) -> Any:
        return await self._send(HttpMethod.DELETE, route, body, query, headers)

    async def patch(
        self,
        route: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,  # noqa: ARG002
    ) -> Any:
        return await self._send(HttpMethod.PATCH, route, body, query, headers)

    async def close(self) -> None:
        self.closed = True
