# Standard library imports
import logging
from typing import Optional

# Local application imports
from ....domain.constants.inference_fields import InferenceRoutes
from ....infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ....infrastructure.external.health_prober import HealthProber
from ....utils.datetime_utils import epoch_ms_to_iso
from ...dto.inference_dto import InferenceStatusResponse

logger = logging.getLogger(__name__)


class GetInferenceStatusUseCase:
    """Use case for reporting inference service availability"""

    def __init__(
        self,
        prober: HealthProber,
        diagnostics: Optional[ConnectionDiagnostics] = None,
    ) -> None:
        self.prober = prober
        self.diagnostics = diagnostics

    async def execute(self, full_test: bool = False) -> InferenceStatusResponse:
        """
        Get the (possibly cached) inference service status

        Args:
            full_test: Also run a sweep over every configured endpoint

        Returns:
            InferenceStatusResponse with availability and service info
        """
        logger.info("Checking inference API status from API endpoint...")
        status = await self.prober.check_status()

        detailed_test = None
        if full_test and self.diagnostics is not None:
            logger.info("Running full connection test...")
            detailed_test = await self.diagnostics.run_full_test()

        endpoint = self.prober.endpoint
        return InferenceStatusResponse(
            available=status.available,
            simulation=status.simulation_active,
            last_check=status.last_checked_at,
            last_check_iso=epoch_ms_to_iso(status.last_checked_at),
            info=status.last_info,
            last_error=status.last_error,
            api_url=endpoint.url_for(InferenceRoutes.PREDICT),
            info_url=endpoint.url_for(InferenceRoutes.INFO),
            detailed_test=detailed_test,
        )
