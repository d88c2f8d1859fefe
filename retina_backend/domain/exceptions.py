# Standard library imports
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories for calls to the inference service"""
    CONNECTION_REFUSED = "connection_refused"
    DNS_NOT_FOUND = "dns_not_found"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    MALFORMED_PAYLOAD = "malformed_payload"
    ALL_ENDPOINTS_EXHAUSTED = "all_endpoints_exhausted"

    @property
    def retryable(self) -> bool:
        return self in RETRYABLE_KINDS


RETRYABLE_KINDS = frozenset({
    ErrorKind.CONNECTION_REFUSED,
    ErrorKind.DNS_NOT_FOUND,
    ErrorKind.TIMEOUT,
    ErrorKind.SERVER_ERROR,
})


class RequestError(Exception):
    """
    Raised by the retrying request client once a call has failed for good.

    Attributes:
        kind: Classified failure category
        status_code: HTTP status when the service answered, else None
        attempts: Number of attempts made before giving up
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.attempts = attempts


class InferenceError(Exception):
    """Raised when a prediction cannot be obtained from the inference service"""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @classmethod
    def from_request_error(cls, error: RequestError) -> "InferenceError":
        return cls(error.kind, str(error), status_code=error.status_code)


class AllEndpointsExhaustedError(InferenceError):
    """Every configured inference endpoint failed its probe"""

    def __init__(self, message: str = "All inference service URLs are unavailable") -> None:
        super().__init__(ErrorKind.ALL_ENDPOINTS_EXHAUSTED, message)
