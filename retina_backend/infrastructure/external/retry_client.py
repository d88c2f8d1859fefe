# Standard library imports
import asyncio
import logging
import socket
from typing import Any, Awaitable, Callable, Optional

# External package imports
import httpx

# Local application imports
from ...domain.exceptions import ErrorKind, RequestError
from ...domain.models.endpoint import RetryState

logger = logging.getLogger(__name__)

DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "temporary failure in name resolution",
    "no address associated with hostname",
)

ResponseCheck = Callable[[httpx.Response], bool]


def _is_dns_failure(exc: BaseException) -> bool:
    """Walk the exception chain looking for a resolver failure"""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in DNS_FAILURE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


def classify_error(exc: Exception) -> ErrorKind:
    """
    Map an httpx exception onto the inference error taxonomy.

    Args:
        exc: Exception raised while sending a request or checking its status

    Returns:
        ErrorKind for the failure
    """
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code >= 500:
            return ErrorKind.SERVER_ERROR
        return ErrorKind.CLIENT_ERROR
    if isinstance(exc, httpx.TimeoutException):
        return ErrorKind.TIMEOUT
    if isinstance(exc, httpx.ConnectError):
        if _is_dns_failure(exc):
            return ErrorKind.DNS_NOT_FOUND
        return ErrorKind.CONNECTION_REFUSED
    return ErrorKind.CONNECTION_REFUSED


class RetryingRequestClient:
    """
    Sends HTTP requests with a bounded, linearly backed-off retry policy.

    Connection refused, DNS failures, timeouts and 5xx answers are retried;
    4xx answers fail at once. Every call to the inference service goes
    through here so the policy is the same everywhere.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        max_attempts: int = 3,
        base_delay_ms: int = 1000,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the retrying client.

        Args:
            http_client: Underlying async HTTP client (shared or test transport)
            max_attempts: Total attempts per call, including the first
            base_delay_ms: Backoff unit; the wait after attempt N is N x base_delay_ms
            sleep: Coroutine used to wait between attempts
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.http_client = http_client
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    async def send(
        self,
        method: str,
        url: str,
        accept: Optional[ResponseCheck] = None,
        max_attempts: Optional[int] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Args:
            method: HTTP method
            url: Absolute URL
            accept: Optional check on a 2xx response; a response it rejects
                counts as a failed attempt and is retried
            max_attempts: Overrides the client-wide attempt budget for this call
            **kwargs: Passed through to httpx (json, files, timeout, ...)

        Returns:
            The successful response

        Raises:
            RequestError: When a non-retryable error occurs or attempts run out
        """
        state = RetryState(
            max_attempts=max_attempts or self.max_attempts,
            base_delay_ms=self.base_delay_ms,
        )
        last_error: Optional[RequestError] = None

        while state.can_retry():
            state.attempt_count += 1
            retry_allowed = True
            try:
                response = await self.http_client.request(method, url, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                kind = classify_error(exc)
                last_error = RequestError(
                    kind,
                    f"{method} {url} returned {exc.response.status_code}",
                    status_code=exc.response.status_code,
                    attempts=state.attempt_count,
                )
                retry_allowed = kind.retryable
            except httpx.HTTPError as exc:
                kind = classify_error(exc)
                last_error = RequestError(
                    kind,
                    f"{method} {url} failed: {exc}",
                    attempts=state.attempt_count,
                )
                retry_allowed = kind.retryable
            else:
                if accept is None or accept(response):
                    return response
                logger.warning(f"Unexpected response format from {url}: {response.text[:200]}")
                last_error = RequestError(
                    ErrorKind.MALFORMED_PAYLOAD,
                    "Invalid API response format",
                    status_code=response.status_code,
                    attempts=state.attempt_count,
                )

            if not retry_allowed:
                logger.warning(f"Non-retryable error ({last_error.kind.value}) for {method} {url}")
                raise last_error

            if not state.can_retry():
                break

            delay_ms = state.next_delay_ms()
            logger.info(
                f"Attempt {state.attempt_count}/{state.max_attempts} for {method} {url} failed "
                f"({last_error.kind.value}); retrying in {delay_ms}ms"
            )
            await self._sleep(delay_ms / 1000)

        logger.warning(f"Giving up on {method} {url} after {state.attempt_count} attempts")
        raise last_error
