from .prediction import SeverityClass, PredictionResult, FileRef, InlineImagePayload, ImageInput
from .endpoint import EndpointCandidate, EndpointStatus, RetryState
from .analysis import RetinaAnalysis, ImageDetails, recommendation_for

__all__ = [
    "SeverityClass",
    "PredictionResult",
    "FileRef",
    "InlineImagePayload",
    "ImageInput",
    "EndpointCandidate",
    "EndpointStatus",
    "RetryState",
    "RetinaAnalysis",
    "ImageDetails",
    "recommendation_for",
]
