from .inference_provider import InferenceProvider
from .analysis_provider import AnalysisProvider


__all__ = [
    "InferenceProvider",
    "AnalysisProvider",
]
