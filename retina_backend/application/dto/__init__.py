from .inference_dto import (
    InferenceStatusResponse,
    ConnectionTestResponse,
    InferenceInfoResponse,
    EndpointSweepResult,
    EndpointSweepResponse,
)
from .analysis_dto import (
    AnalysisRequest,
    AnalysisResultsResponse,
    ImageDetailsResponse,
    RetinaAnalysisResponse,
)

__all__ = [
    "InferenceStatusResponse",
    "ConnectionTestResponse",
    "InferenceInfoResponse",
    "EndpointSweepResult",
    "EndpointSweepResponse",
    "AnalysisRequest",
    "AnalysisResultsResponse",
    "ImageDetailsResponse",
    "RetinaAnalysisResponse",
]
