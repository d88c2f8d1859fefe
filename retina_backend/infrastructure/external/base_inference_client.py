# Standard library imports
import logging

# Local application imports
from ...domain.models.endpoint import EndpointCandidate
from .endpoint_registry import EndpointRegistry
from .retry_client import RetryingRequestClient

logger = logging.getLogger(__name__)


class BaseInferenceClient:
    """
    Base class for inference service clients.

    Provides common initialization for the endpoint registry, the retrying
    request client, and the request timeout.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        request_client: RetryingRequestClient,
        timeout: float = 30.0,
    ):
        """
        Initialize base inference client.

        Args:
            registry: Candidate inference-service URLs with the active cursor
            request_client: Retry-wrapped HTTP client used for every call
            timeout: Request timeout in seconds.
        """
        self.registry = registry
        self.request_client = request_client
        self.timeout = timeout

    @property
    def endpoint(self) -> EndpointCandidate:
        """Currently preferred inference endpoint"""
        return self.registry.current_endpoint()

    @property
    def base_url(self) -> str:
        return self.endpoint.base_url
