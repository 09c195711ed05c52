"""
Outbound HTTP clients for the RadioManager backend.

- request_handler: single signed request (auth, TLS, HMAC, timeout, retry)
- request_client: client factory binding base URL and defaults
"""

from src.clients.request_client import (
    ClientOptions,
    FakeRequestClient,
    RequestClient,
    RequestClientProtocol,
    create_client,
)
from src.clients.request_handler import (
    BasicAuth,
    HMACOptions,
    HttpMethod,
    RequestClientError,
    RequestOptions,
    SSLOptions,
    sanitize_request_error,
    send_request,
)

__all__ = [
    "BasicAuth",
    "ClientOptions",
    "FakeRequestClient",
    "HMACOptions",
    "HttpMethod",
    "RequestClient",
    "RequestClientError",
    "RequestClientProtocol",
    "RequestOptions",
    "SSLOptions",
    "create_client",
    "sanitize_request_error",
    "send_request",
]
