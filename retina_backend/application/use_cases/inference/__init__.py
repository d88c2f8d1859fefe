from .get_inference_status import GetInferenceStatusUseCase
from .check_inference_connection import CheckInferenceConnectionUseCase
from .get_inference_info import GetInferenceInfoUseCase
from .sweep_inference_endpoints import SweepInferenceEndpointsUseCase

__all__ = [
    "GetInferenceStatusUseCase",
    "CheckInferenceConnectionUseCase",
    "GetInferenceInfoUseCase",
    "SweepInferenceEndpointsUseCase",
]
