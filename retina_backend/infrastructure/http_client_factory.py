"""HTTP client factory for connection pooling."""
import httpx
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Global shared HTTP client instance
_shared_client: Optional[httpx.AsyncClient] = None


def create_http_client(
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 60.0,
) -> httpx.AsyncClient:
    """
    Build an async HTTP client for talking to the inference service.

    Args:
        transport: Optional transport override (tests pass httpx.MockTransport)
        timeout: Default timeout in seconds; individual calls pass their own

    Returns:
        New AsyncClient instance
    """
    return httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=30.0,
        ),
        transport=transport,
    )


def get_shared_http_client() -> httpx.AsyncClient:
    """
    Get or create the async HTTP client shared by every inference call.

    The health prober, prediction invoker and diagnostics all send through
    one connection pool. A closed client is replaced on the next lookup.

    Returns:
        Shared AsyncClient instance
    """
    global _shared_client

    if _shared_client is None or _shared_client.is_closed:
        _shared_client = create_http_client()
        logger.info("Created shared HTTP client for connection pooling")

    return _shared_client


async def close_shared_http_client() -> None:
    """
    Close the shared HTTP client. Called from the application lifespan on shutdown.
    """
    global _shared_client

    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.info("Closed shared HTTP client")
