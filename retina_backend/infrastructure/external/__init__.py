"""External service clients for communicating with the retina inference service"""

from .endpoint_registry import EndpointRegistry
from .retry_client import RetryingRequestClient, classify_error
from .health_prober import HealthProber
from .inference_client import InferenceClient
from .connection_diagnostics import ConnectionDiagnostics

__all__ = [
    "EndpointRegistry",
    "RetryingRequestClient",
    "classify_error",
    "HealthProber",
    "InferenceClient",
    "ConnectionDiagnostics",
]
