from typing import TYPE_CHECKING
from ...application.services.simulation_fallback import SimulationFallback
from ...application.use_cases.analysis.analyze_retina_image import AnalyzeRetinaImageUseCase
from ...application.use_cases.inference.check_inference_connection import CheckInferenceConnectionUseCase
from ...application.use_cases.inference.get_inference_info import GetInferenceInfoUseCase
from ...application.use_cases.inference.get_inference_status import GetInferenceStatusUseCase
from ...application.use_cases.inference.sweep_inference_endpoints import SweepInferenceEndpointsUseCase
from ...infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ...infrastructure.external.health_prober import HealthProber
from ...infrastructure.external.inference_client import InferenceClient

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class AnalysisProvider:
    """Analysis use case provider - registers all inference/analysis use cases"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register analysis use cases.
        Use cases are created on-demand via factories.
        """
        # Register GetInferenceStatusUseCase
        container.register_factory(
            GetInferenceStatusUseCase,
            lambda: GetInferenceStatusUseCase(
                prober=container.get(HealthProber),
                diagnostics=container.get(ConnectionDiagnostics),
            )
        )

        # Register CheckInferenceConnectionUseCase
        container.register_factory(
            CheckInferenceConnectionUseCase,
            lambda: CheckInferenceConnectionUseCase(
                diagnostics=container.get(ConnectionDiagnostics),
            )
        )

        # Register GetInferenceInfoUseCase
        container.register_factory(
            GetInferenceInfoUseCase,
            lambda: GetInferenceInfoUseCase(
                diagnostics=container.get(ConnectionDiagnostics),
            )
        )

        # Register SweepInferenceEndpointsUseCase
        container.register_factory(
            SweepInferenceEndpointsUseCase,
            lambda: SweepInferenceEndpointsUseCase(
                diagnostics=container.get(ConnectionDiagnostics),
            )
        )

        # Register AnalyzeRetinaImageUseCase
        container.register_factory(
            AnalyzeRetinaImageUseCase,
            lambda: AnalyzeRetinaImageUseCase(
                inference_client=container.get(InferenceClient),
                simulation_fallback=container.get(SimulationFallback),
            )
        )
