# Standard library imports
import logging
import time
from typing import Any, Callable, Dict, List, Optional

# Local application imports
from ...domain.constants.inference_fields import InferenceInfoFields, InferenceRoutes
from ...domain.exceptions import ErrorKind, RequestError
from ...domain.models.endpoint import EndpointCandidate
from .base_inference_client import BaseInferenceClient
from .endpoint_registry import EndpointRegistry
from .health_prober import HealthProber
from .retry_client import RetryingRequestClient

logger = logging.getLogger(__name__)

# Response time above which operators are warned
SLOW_RESPONSE_MS = 2000

# Per-endpoint timeout (seconds) for the endpoint sweep; one attempt each
SWEEP_TIMEOUT = 10.0

# Reported when INFERENCE_API_URL is not set in the environment
UNSET_ENV_VALUE = "(not set)"


def generate_recommendations(
    main_test: Dict[str, Any],
    local_test: Optional[Dict[str, Any]],
    configured_url: str,
) -> List[str]:
    """
    Build operator guidance from connection test results.

    Args:
        main_test: Result of the multi-endpoint sweep
        local_test: Result of the local development probe, if one was made
        configured_url: Currently preferred inference base URL

    Returns:
        Human-readable recommendations
    """
    recommendations: List[str] = []

    if main_test.get("success"):
        recommendations.append("Connection to the inference API succeeded. No action required.")

        data = main_test.get("data") or {}
        if data.get(InferenceInfoFields.SIMULATION_MODE_ENABLED):
            recommendations.append(
                "The inference API is running in simulation mode. Deploy the ML model "
                "to get real predictions."
            )

        response_time = main_test.get("response_time_ms", 0)
        if response_time > SLOW_RESPONSE_MS:
            recommendations.append(
                f"Inference API response time is high ({response_time}ms). This may affect "
                f"the user experience; consider optimizing the deployment."
            )
        return recommendations

    recommendations.append("Connection to the primary inference API failed.")

    code = main_test.get("code")
    if code == ErrorKind.CONNECTION_REFUSED.value:
        recommendations.append("The inference API server is not responding. Make sure the service is running and reachable.")
    elif code == ErrorKind.DNS_NOT_FOUND.value:
        recommendations.append("The inference API host was not found. Check the configured URL.")
    elif code == ErrorKind.TIMEOUT.value:
        recommendations.append("The connection to the inference API timed out. The server may be slow or unresponsive.")

    if local_test and local_test.get("success"):
        recommendations.append(
            "Connection to localhost succeeded. Consider using localhost while the "
            "inference API deployment is being fixed."
        )
    elif local_test is not None:
        recommendations.append(
            "Connection to localhost also failed. Make sure the inference service runs on one of the endpoints."
        )

    recommendations.append(
        f"Check the INFERENCE_API_URL environment variable (currently: {configured_url}). "
        f"Make sure the URL is correct and reachable."
    )
    recommendations.append(
        "Simulation mode is enabled. The application keeps working with simulated predictions."
    )
    return recommendations


class ConnectionDiagnostics(BaseInferenceClient):
    """
    Full connection test across every configured inference endpoint.

    Unlike the health prober this makes one sweep without caching, and
    reports per-endpoint failures for operators. Also serves the primary
    endpoint's info document and an every-endpoint sweep that leaves the
    preferred endpoint untouched.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        request_client: RetryingRequestClient,
        prober: HealthProber,
        timeout: float = 20.0,
        local_url: str = "http://localhost:5001",
        local_timeout: float = 5.0,
        configured_env_url: Optional[str] = None,
        sweep_timeout: float = SWEEP_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(registry, request_client, timeout=timeout)
        self.prober = prober
        self.local_url = local_url
        self.local_timeout = local_timeout
        self.configured_env_url = configured_env_url
        self.sweep_timeout = sweep_timeout
        self._clock = clock

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)

    async def _fetch_info(self, endpoint: EndpointCandidate, timeout: float) -> Any:
        response = await self.request_client.send(
            "GET",
            endpoint.url_for(InferenceRoutes.INFO),
            timeout=timeout,
        )
        try:
            return response.json()
        except ValueError:
            return {}

    async def run_full_test(self) -> Dict[str, Any]:
        """
        Test the current endpoint, then every alternate until one answers.

        The first alternate that answers becomes the preferred endpoint. When
        all fail the cursor is left where it started.

        Returns:
            Diagnostic report dictionary
        """
        original_index = self.registry.active_index
        original = self.registry.current_endpoint()
        logger.info(f"Testing inference API connection at: {original.url_for(InferenceRoutes.INFO)}")

        started = self._clock()
        try:
            data = await self._fetch_info(original, self.timeout)
        except RequestError as exception:
            logger.info(f"Connection to primary inference API ({original.base_url}) failed: {exception}")
            main_error = exception
        else:
            response_time = self._elapsed_ms(started)
            logger.info(f"Connection succeeded. Response time: {response_time}ms")
            self.prober.record_active_endpoint(original.base_url)
            return {
                "success": True,
                "response_time_ms": response_time,
                "data": data,
                "url": original.base_url,
            }

        alternative_results: List[Dict[str, Any]] = []
        for index, candidate in enumerate(self.registry.candidates):
            if index == original_index:
                continue

            logger.info(f"Trying alternate URL: {candidate.url_for(InferenceRoutes.INFO)}")
            alt_started = self._clock()
            try:
                data = await self._fetch_info(candidate, self.timeout)
            except RequestError as exception:
                logger.info(f"Alternate URL {candidate.base_url} also failed: {exception}")
                alternative_results.append({
                    "url": candidate.base_url,
                    "error": str(exception),
                    "code": exception.kind.value,
                })
                continue

            self.registry.move_to(index)
            self.prober.record_active_endpoint(candidate.base_url)
            logger.info(f"Connection to alternate URL succeeded: {candidate.base_url}")
            return {
                "success": True,
                "response_time_ms": self._elapsed_ms(alt_started),
                "data": data,
                "url": candidate.base_url,
                "is_alternative": True,
                "original_url": original.base_url,
            }

        self.registry.move_to(original_index)
        return {
            "success": False,
            "error": str(main_error),
            "code": main_error.kind.value,
            "url": original.base_url,
            "alternative_results": alternative_results,
            "time_ms": self._elapsed_ms(started),
        }

    async def test_connection(self) -> Dict[str, Any]:
        """
        Operator-facing connection test with recommendations.

        Runs the full sweep and, if it fails, checks whether a locally running
        inference service answers.
        """
        main_test = await self.run_full_test()

        if main_test["success"]:
            data = main_test.get("data") or {}
            return {
                "success": True,
                "message": f"Connection to inference API succeeded ({main_test['response_time_ms']}ms)",
                "url": main_test["url"],
                "model_loaded": data.get(InferenceInfoFields.MODEL_LOADED) is True,
                "data": data,
            }

        logger.info("Trying connection to localhost...")
        local = EndpointCandidate(base_url=self.local_url)
        try:
            local_data = await self._fetch_info(local, self.local_timeout)
        except RequestError as exception:
            logger.info(f"Connection to localhost also failed: {exception}")
            return {
                "success": False,
                "message": "Connection to inference API and localhost failed",
                "error": main_test.get("error") or "Cannot connect to inference API",
                "recommendations": generate_recommendations(main_test, {"success": False}, self.base_url),
                "urls_tried": [main_test["url"], self.local_url],
                "simulation_mode": True,
            }

        logger.info("Connection to localhost succeeded")
        return {
            "success": True,
            "message": "Connection to inference API failed but localhost succeeded",
            "url": self.local_url,
            "recommendations": generate_recommendations(
                main_test, {"success": True, "data": local_data}, self.base_url
            ),
            "data": local_data,
        }

    async def fetch_primary_info(self) -> Dict[str, Any]:
        """
        Fetch the info document of the configured primary endpoint.

        Always asks the first candidate, whatever endpoint is currently
        preferred, with the normal retry policy.

        Returns:
            {"success": True, "api_url", "info"} or
            {"success": False, "error", "code", "api_url"}
        """
        primary = self.registry.candidates[0]
        logger.info(f"Fetching info from inference API: {primary.url_for(InferenceRoutes.INFO)}")
        try:
            info = await self._fetch_info(primary, self.timeout)
        except RequestError as exception:
            logger.error(f"Failed to fetch inference API info from {primary.base_url}: {exception}")
            return {
                "success": False,
                "error": str(exception),
                "code": exception.kind.value,
                "api_url": primary.base_url,
            }
        return {"success": True, "api_url": primary.base_url, "info": info}

    async def _sweep_one(self, endpoint: EndpointCandidate) -> Dict[str, Any]:
        started = self._clock()
        try:
            response = await self.request_client.send(
                "GET",
                endpoint.url_for(InferenceRoutes.INFO),
                max_attempts=1,
                timeout=self.sweep_timeout,
            )
        except RequestError as exception:
            logger.info(f"Connection to {endpoint.base_url} failed: {exception}")
            return {
                "url": endpoint.base_url,
                "status": "error",
                "error": str(exception),
                "code": exception.kind.value,
                "status_code": exception.status_code,
            }

        try:
            data = response.json()
        except ValueError:
            data = response.text
        logger.info(f"Connection to {endpoint.base_url} successful")
        return {
            "url": endpoint.base_url,
            "status": "success",
            "response_time_ms": self._elapsed_ms(started),
            "data": data,
            "status_code": response.status_code,
        }

    async def sweep_endpoints(self) -> Dict[str, Any]:
        """
        Probe every configured endpoint once and report each outcome.

        Does not stop at the first answer and never moves the registry
        cursor or touches the cached status.

        Returns:
            {"results": [...], "env": {"INFERENCE_API_URL": ...}}
        """
        results = []
        for candidate in self.registry.candidates:
            logger.info(f"Testing connection to {candidate.url_for(InferenceRoutes.INFO)}...")
            results.append(await self._sweep_one(candidate))

        return {
            "results": results,
            "env": {"INFERENCE_API_URL": self.configured_env_url or UNSET_ENV_VALUE},
        }
