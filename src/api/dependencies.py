"""
RadioManager Dialog Service - Route Dependencies

Patterns Applied:
- Dependency injection via Depends() for easy testing
- Singleton bound client (connection pooling), closed by the lifespan handler
"""

from src.clients.request_client import (
    ClientOptions,
    RequestClientProtocol,
    create_client,
)
from src.core.config import Settings, get_settings

_request_client: RequestClientProtocol | None = None


def client_options(settings: Settings) -> ClientOptions:
    """Client defaults derived from settings."""
    return ClientOptions(
        url=settings.api_url,
        headers=settings.default_headers,
        auth=settings.basic_auth(),
        ssl=settings.ssl_options(),
        hmac=settings.hmac_options(),
        timeout=settings.request_timeout,
        retry=settings.request_retries or None,
    )


def get_request_client() -> RequestClientProtocol:
    """Get the cached RadioManager client.

    Returns:
        Bound client shared by all requests
    """
    global _request_client
    if _request_client is None:
        _request_client = create_client(client_options(get_settings()))
    return _request_client


async def close_request_client() -> None:
    """Close the cached client, if one was created."""
    global _request_client
    if _request_client is not None:
        await _request_client.close()
        _request_client = None
