# Standard library imports
import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

# External package imports
import httpx

# Local application imports
from ...domain.constants.inference_fields import InferenceInfoFields, InferenceRoutes
from ...domain.exceptions import RequestError
from ...domain.models.endpoint import EndpointCandidate, EndpointStatus
from .base_inference_client import BaseInferenceClient
from .endpoint_registry import EndpointRegistry
from .retry_client import RetryingRequestClient

logger = logging.getLogger(__name__)


class ProbePhase(str, Enum):
    """States of one probe cycle over the endpoint registry"""
    PROBING = "probing"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


def next_phase(probe_succeeded: bool, cycled: bool) -> ProbePhase:
    """
    Transition after probing one endpoint.

    Args:
        probe_succeeded: Whether the endpoint answered with an online marker
        cycled: Whether the registry cursor is back at the cycle's start

    Returns:
        The phase the cycle moves to
    """
    if probe_succeeded:
        return ProbePhase.SUCCEEDED
    if cycled:
        return ProbePhase.EXHAUSTED
    return ProbePhase.PROBING


def is_online_payload(payload: Any) -> bool:
    """True if an info-route body carries a recognized online marker"""
    if not isinstance(payload, dict):
        return False
    return (
        payload.get(InferenceInfoFields.STATUS) == InferenceInfoFields.STATUS_ONLINE
        or payload.get(InferenceInfoFields.SERVICE) == InferenceInfoFields.SERVICE_NAME
    )


def _is_online_response(response: httpx.Response) -> bool:
    try:
        return is_online_payload(response.json())
    except ValueError:
        return False


class HealthProber(BaseInferenceClient):
    """
    Tracks which inference endpoint is usable.

    Probes the info route of the current endpoint and walks the registry
    until one answers or every candidate has been tried once. The owned
    EndpointStatus is only ever written from here.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        request_client: RetryingRequestClient,
        status: Optional[EndpointStatus] = None,
        timeout: float = 20.0,
        cache_ttl_ms: int = 60000,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the health prober.

        Args:
            registry: Candidate inference-service URLs
            request_client: Retry-wrapped HTTP client
            status: Status instance to own; a fresh one is created if omitted
            timeout: Probe timeout in seconds
            cache_ttl_ms: Age below which a previous probe result is reused
            clock: Returns the current time in seconds
        """
        super().__init__(registry, request_client, timeout=timeout)
        self._status = status or EndpointStatus()
        self._status.active_index = registry.active_index
        self.cache_ttl_ms = cache_ttl_ms
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def status(self) -> EndpointStatus:
        return self._status

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def check_status(self, force_refresh: bool = False) -> EndpointStatus:
        """
        Return the inference service status, probing when the cache is stale.

        Args:
            force_refresh: Probe even if the cached result is still fresh

        Returns:
            The owned EndpointStatus
        """
        if not force_refresh and self._status.is_fresh(self._now_ms(), self.cache_ttl_ms):
            logger.debug("Using cached inference API status")
            return self._status

        async with self._lock:
            # Another caller may have finished a probe while we waited
            if not force_refresh and self._status.is_fresh(self._now_ms(), self.cache_ttl_ms):
                return self._status
            return await self._run_probe_cycle()

    async def _run_probe_cycle(self) -> EndpointStatus:
        start_index = self.registry.active_index
        last_error: Optional[RequestError] = None
        phase = ProbePhase.PROBING

        logger.info(f"Checking inference API status at: {self.endpoint.url_for(InferenceRoutes.INFO)}")

        while phase is ProbePhase.PROBING:
            endpoint = self.registry.current_endpoint()
            try:
                info = await self.probe(endpoint)
            except RequestError as exception:
                last_error = exception
                logger.info(
                    f"Failed to connect to {endpoint.base_url} after retries "
                    f"({exception.kind.value}). Switching to next URL..."
                )
                self.registry.advance()
                phase = next_phase(False, self.registry.has_cycled(start_index))
            else:
                self._record_success(endpoint, info)
                phase = ProbePhase.SUCCEEDED

        if phase is ProbePhase.EXHAUSTED:
            self._record_exhausted(last_error)

        return self._status

    async def probe(self, endpoint: EndpointCandidate) -> Dict[str, Any]:
        """
        Probe one endpoint's info route.

        Returns:
            The info payload

        Raises:
            RequestError: If the endpoint never answered with an online marker
        """
        response = await self.request_client.send(
            "GET",
            endpoint.url_for(InferenceRoutes.INFO),
            accept=_is_online_response,
            timeout=self.timeout,
        )
        return response.json()

    def _record_success(self, endpoint: EndpointCandidate, info: Dict[str, Any]) -> None:
        status = self._status
        status.available = True
        status.simulation_active = info.get(InferenceInfoFields.SIMULATION_MODE_ENABLED) is True
        status.last_info = info
        status.active_url = endpoint.base_url
        status.active_index = self.registry.active_index
        status.last_checked_at = self._now_ms()
        status.checked = True
        status.consecutive_failure_count = 0
        status.last_error = None

        classes = info.get(InferenceInfoFields.CLASSES)
        logger.info(
            f"Inference API available at {endpoint.base_url}: "
            f"model={info.get(InferenceInfoFields.MODEL_NAME, 'unknown')}, "
            f"classes={', '.join(classes) if isinstance(classes, list) else 'unknown'}, "
            f"api_version={info.get(InferenceInfoFields.API_VERSION, '1.0.0')}, "
            f"simulation={'yes' if status.simulation_active else 'no'}"
        )

    def _record_exhausted(self, last_error: Optional[RequestError]) -> None:
        urls = ", ".join(candidate.base_url for candidate in self.registry.candidates)
        logger.warning(f"All inference API URLs ({urls}) were tried and failed")

        self.mark_unavailable(
            "All inference API URLs are unavailable",
            kind=last_error.kind.value if last_error else None,
        )

        # Prefer the last endpoint that worked over the last one that failed
        if self._status.active_url:
            logger.info(f"Falling back to last successful URL: {self._status.active_url}")
            self.registry.restore(self._status.active_url)
        self._status.active_index = self.registry.active_index

        logger.warning("Simulation mode enabled. Predictions will use fallback data")

    def mark_unavailable(self, message: str, kind: Optional[str] = None) -> None:
        """Put the status into simulation mode after a failed check"""
        now = self._now_ms()
        status = self._status
        status.available = False
        status.simulation_active = True
        status.last_error = {"message": message, "timestamp": now}
        if kind:
            status.last_error["kind"] = kind
        status.consecutive_failure_count += 1
        status.last_checked_at = now
        status.checked = True

    def record_active_endpoint(self, base_url: str) -> None:
        """Remember an endpoint that answered outside a probe cycle"""
        self._status.active_url = base_url
        self._status.active_index = self.registry.active_index
