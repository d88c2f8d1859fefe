from .inference import (
    GetInferenceStatusUseCase,
    CheckInferenceConnectionUseCase,
    GetInferenceInfoUseCase,
    SweepInferenceEndpointsUseCase,
)
from .analysis import AnalyzeRetinaImageUseCase

__all__ = [
    "GetInferenceStatusUseCase",
    "CheckInferenceConnectionUseCase",
    "GetInferenceInfoUseCase",
    "SweepInferenceEndpointsUseCase",
    "AnalyzeRetinaImageUseCase",
]
