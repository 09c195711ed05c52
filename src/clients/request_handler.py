"""
Signed Request Client

Sends a single outbound HTTP call described by a RequestOptions descriptor,
with optional basic auth, TLS client certificate, HMAC signing, timeout and
retry.

Patterns Applied:
- Retry with exponential backoff (delay defaults to 0: immediate re-dispatch)
- Custom namespaced exceptions
- Sanitized errors: only plain strings are kept, never httpx request/response
  objects, so errors are safe to log and serialize
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import hmac
import json
import secrets
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Final

import httpx

from src.core.exceptions import ConfigurationError, RadioManagerServiceError
from src.core.logging import get_logger
from src.core.tracing import get_tracer

logger = get_logger(__name__)

# =============================================================================
# Module Constants
# =============================================================================

BASIC_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

DEFAULT_HMAC_ALGORITHM: Final[str] = "sha256"
NONCE_BYTES: Final[int] = 24
DEFAULT_RETRY_DELAY: Final[float] = 0.0

# Status codes treated as transient when a retry count is configured
RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset(
    {408, 413, 429, 500, 502, 503, 504, 521, 522, 524}
)


# =============================================================================
# Custom Exceptions
# =============================================================================


class RequestClientError(RadioManagerServiceError):
    """Single error surfaced for any failed outbound request.

    Attributes:
        status_code: HTTP status of the failed response, if any
        request: "METHOD url" of the failed request
        response: Response text, kept only for JSON responses
        status_text: Reason phrase of the failed response
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        request: str | None = None,
        response: str | None = None,
        status_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.request = request
        self.response = response
        self.status_text = status_text

    def to_log_dict(self) -> dict[str, Any]:
        """Flat, serialization-safe view for structured logging."""
        return {
            "error": str(self),
            "status_code": self.status_code,
            "request": self.request,
            "response": self.response,
            "status_text": self.status_text,
        }


# =============================================================================
# Request Descriptor
# =============================================================================


class HttpMethod(str, Enum):
    """HTTP methods supported by the request client."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"


@dataclass(frozen=True)
class BasicAuth:
    """Basic authentication credentials."""

    user: str
    password: str


@dataclass(frozen=True)
class SSLOptions:
    """TLS client certificate and private key (paths to PEM files)."""

    cert: str
    key: str


@dataclass(frozen=True)
class HMACOptions:
    """HMAC request signing configuration.

    Attributes:
        key: Signing key identifier, part of the signed data
        header: Header name placeholder (not emitted)
        secret: Shared secret used for the HMAC
        algorithm: hashlib digest name for both hashing steps
    """

    key: str
    header: str
    secret: str
    algorithm: str = DEFAULT_HMAC_ALGORITHM


@dataclass
class RequestOptions:
    """Descriptor of one outbound request.

    The body is only sent for non-get methods.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: Any = field(default_factory=dict)
    auth: BasicAuth | None = None
    ssl: SSLOptions | None = None
    hmac: HMACOptions | None = None
    timeout: float | None = None
    retry: int | None = None
    retry_delay: float = DEFAULT_RETRY_DELAY


# =============================================================================
# HMAC Signing
# =============================================================================


def serialize_body(body: Any) -> str:
    """Serialize a request body to compact JSON."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def _utc_timestamp() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _nonce() -> str:
    return secrets.token_hex(NONCE_BYTES)


def make_hmac_headers(
    options: HMACOptions,
    serialized_body: str,
    *,
    timestamp: str | None = None,
    nonce: str | None = None,
) -> dict[str, str]:
    """Compute the HMAC signature headers for a serialized body.

    The signed data is the body, timestamp, nonce and signing key joined by
    newlines. It is hashed with the configured digest, and the hex digest is
    then HMAC'd with the shared secret and base64 encoded.

    Args:
        options: HMAC configuration
        serialized_body: Exact body string that will be sent
        timestamp: ISO-8601 timestamp (generated when omitted)
        nonce: Hex nonce (generated when omitted)

    Returns:
        Headers carrying hash, nonce, timestamp, charset and Content-Length
    """
    timestamp = timestamp if timestamp is not None else _utc_timestamp()
    nonce = nonce if nonce is not None else _nonce()

    auth_data = "\n".join([serialized_body, timestamp, nonce, options.key])
    auth_hash = hashlib.new(options.algorithm, auth_data.encode("utf-8")).hexdigest()
    digest = hmac.new(
        options.secret.encode("utf-8"),
        auth_hash.encode("utf-8"),
        options.algorithm,
    ).digest()

    return {
        "hash": base64.b64encode(digest).decode("ascii"),
        "nonce": nonce,
        "timestamp": timestamp,
        "charset": "utf8",
        "Content-Length": str(len(serialized_body.encode("utf-8"))),
    }


# =============================================================================
# Error Sanitizing
# =============================================================================


def sanitize_request_error(error: Exception) -> RequestClientError:
    """Reduce an httpx error to a RequestClientError holding plain strings.

    Args:
        error: Error raised while dispatching a request

    Returns:
        RequestClientError with request line, JSON response text and status
    """
    request_line: str | None = None
    response_text: str | None = None
    status_text: str | None = None
    status_code: int | None = None

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        request_line = f"{response.request.method} {response.request.url}"
        status_code = response.status_code
        status_text = response.reason_phrase
        if response.headers.get("content-type", "").startswith("application/json"):
            response_text = response.text
    elif isinstance(error, httpx.RequestError):
        try:
            request_line = f"{error.request.method} {error.request.url}"
        except RuntimeError:
            # Raised by httpx when the error was not bound to a request
            request_line = None

    message = str(error) or error.__class__.__name__
    return RequestClientError(
        message,
        status_code=status_code,
        request=request_line,
        response=response_text,
        status_text=status_text,
    )


# =============================================================================
# Dispatch
# =============================================================================


def build_ssl_context(options: SSLOptions) -> ssl.SSLContext:
    """Create an SSL context presenting the client certificate.

    Raises:
        ConfigurationError: When the certificate or key cannot be loaded
    """
    context = ssl.create_default_context()
    try:
        context.load_cert_chain(certfile=options.cert, keyfile=options.key)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(
            f"Cannot load TLS client certificate {options.cert}: {e}"
        ) from e
    return context


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


async def _dispatch(
    client: httpx.AsyncClient,
    method: HttpMethod,
    options: RequestOptions,
) -> httpx.Response:
    """Send the request, re-dispatching on transient failures.

    Raises:
        httpx.HTTPError: When the last attempt fails
    """
    headers = {**BASIC_HEADERS, **options.headers}
    content: bytes | None = None
    serialized = ""
    if method is not HttpMethod.GET:
        serialized = serialize_body(options.body)
        content = serialized.encode("utf-8")
    if options.hmac:
        headers.update(make_hmac_headers(options.hmac, serialized))

    auth: Any = (
        (options.auth.user, options.auth.password)
        if options.auth
        else httpx.USE_CLIENT_DEFAULT
    )
    timeout: Any = (
        options.timeout if options.timeout is not None else httpx.USE_CLIENT_DEFAULT
    )
    attempts = (options.retry or 0) + 1

    for attempt in range(attempts):
        try:
            response = await client.request(
                method.value.upper(),
                options.url,
                params=options.query,
                headers=headers,
                content=content,
                auth=auth,
                timeout=timeout,
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            if e.response.status_code not in RETRY_STATUS_CODES:
                raise
            if attempt == attempts - 1:
                raise
            reason = f"status {e.response.status_code}"
        except httpx.TransportError as e:
            if attempt == attempts - 1:
                raise
            reason = e.__class__.__name__

        logger.warning(
            "request_retry",
            method=method.value,
            url=options.url,
            attempt=attempt + 1,
            reason=reason,
        )
        if options.retry_delay:
            await asyncio.sleep(options.retry_delay * (2**attempt))

    # range(attempts) always returns or raises
    raise RequestClientError("Unexpected error in retry loop")


async def send_request(
    method: HttpMethod | str,
    options: RequestOptions,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Any:
    """Send one outbound request and return the parsed response body.

    Args:
        method: HTTP method (get, post, put, delete, patch)
        options: Request descriptor
        http_client: Pooled client to send through; a short-lived client is
            created when omitted. Its TLS setup is fixed, so it cannot be
            combined with options.ssl.

    Returns:
        Parsed JSON body, text for non-JSON responses, None when empty.
        The caller is responsible for the shape of the result.

    Raises:
        RequestClientError: On transport failure or non-2xx response
        ConfigurationError: When options.ssl is set together with http_client,
            or the client certificate cannot be loaded
    """
    method = HttpMethod(method)
    if http_client is not None and options.ssl is not None:
        raise ConfigurationError(
            "A TLS client certificate cannot be applied to an existing http_client"
        )
    tracer = get_tracer(__name__)

    with tracer.start_as_current_span("outbound_request") as span:
        span.set_attribute("http.method", method.value.upper())
        span.set_attribute("http.url", options.url)
        logger.debug("outbound_request", method=method.value, url=options.url)

        try:
            if http_client is not None:
                response = await _dispatch(http_client, method, options)
            else:
                verify: Any = build_ssl_context(options.ssl) if options.ssl else True
                async with httpx.AsyncClient(
                    verify=verify,
                    timeout=httpx.Timeout(None),
                    follow_redirects=True,
                ) as client:
                    response = await _dispatch(client, method, options)
        except httpx.HTTPError as e:
            # The span records the sanitized error on exit
            raise sanitize_request_error(e) from e

        span.set_attribute("http.status_code", response.status_code)
        logger.debug(
            "outbound_response",
            method=method.value,
            url=options.url,
            status_code=response.status_code,
        )
        return _parse_body(response)
