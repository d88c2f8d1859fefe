from typing import TYPE_CHECKING
from ...application.services.simulation_fallback import SimulationFallback
from ...core.config import get_settings
from ...domain.models.endpoint import EndpointStatus
from ...infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ...infrastructure.external.endpoint_registry import EndpointRegistry
from ...infrastructure.external.health_prober import HealthProber
from ...infrastructure.external.inference_client import InferenceClient
from ...infrastructure.external.retry_client import RetryingRequestClient
from ...infrastructure.http_client_factory import get_shared_http_client

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class InferenceProvider:
    """Inference infrastructure provider - registers the shared inference clients"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register inference infrastructure as singletons.
        The registry, prober and clients share one EndpointStatus and one
        HTTP connection pool for the lifetime of the container.
        """
        settings = get_settings()

        registry = EndpointRegistry(settings.inference_endpoint_urls)
        request_client = RetryingRequestClient(
            get_shared_http_client(),
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
        )
        status = EndpointStatus()
        prober = HealthProber(
            registry,
            request_client,
            status=status,
            timeout=settings.probe_timeout,
            cache_ttl_ms=settings.status_cache_ttl_ms,
        )

        container.register_singleton(EndpointRegistry, registry)
        container.register_singleton(RetryingRequestClient, request_client)
        container.register_singleton(EndpointStatus, status)
        container.register_singleton(HealthProber, prober)
        container.register_singleton(
            InferenceClient,
            InferenceClient(
                registry,
                request_client,
                prober=prober,
                timeout=settings.predict_timeout,
            ),
        )
        container.register_singleton(
            ConnectionDiagnostics,
            ConnectionDiagnostics(
                registry,
                request_client,
                prober,
                timeout=settings.probe_timeout,
                local_url=settings.local_inference_url,
                local_timeout=settings.local_probe_timeout,
                configured_env_url=settings.inference_api_url_env,
            ),
        )
        container.register_singleton(SimulationFallback, SimulationFallback())
