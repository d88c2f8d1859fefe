"""Constants for domain model field names"""

from .inference_fields import InferenceInfoFields, PredictionFields, InferenceRoutes

__all__ = [
    "InferenceInfoFields",
    "PredictionFields",
    "InferenceRoutes",
]
