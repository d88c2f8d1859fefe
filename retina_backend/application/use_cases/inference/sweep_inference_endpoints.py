# Standard library imports
import logging

# Local application imports
from ....infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ...dto.inference_dto import EndpointSweepResponse

logger = logging.getLogger(__name__)


class SweepInferenceEndpointsUseCase:
    """Use case for probing every configured inference endpoint"""

    def __init__(self, diagnostics: ConnectionDiagnostics) -> None:
        self.diagnostics = diagnostics

    async def execute(self) -> EndpointSweepResponse:
        """
        Probe all endpoints once, without changing the preferred one

        Returns:
            EndpointSweepResponse with one result per configured endpoint
        """
        report = await self.diagnostics.sweep_endpoints()
        reachable = sum(1 for result in report["results"] if result["status"] == "success")
        logger.info(f"Endpoint sweep finished: {reachable}/{len(report['results'])} reachable")
        return EndpointSweepResponse(**report)
