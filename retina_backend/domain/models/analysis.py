# Standard library imports
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

# Local application imports
from .prediction import PredictionResult, SeverityClass


RECOMMENDATIONS: Dict[SeverityClass, str] = {
    SeverityClass.MILD: (
        "Control blood sugar and blood pressure. Repeat examination in 9-12 months."
    ),
    SeverityClass.MODERATE: (
        "Consult an ophthalmologist. Repeat examination in 6 months."
    ),
    SeverityClass.SEVERE: (
        "Urgent referral to an ophthalmologist. Repeat examination in 2-3 months."
    ),
    SeverityClass.PROLIFERATIVE_DR: (
        "Urgent referral to an ophthalmologist for evaluation and possible "
        "laser treatment or surgery."
    ),
}

DEFAULT_RECOMMENDATION = "Routine examination every year."


def recommendation_for(severity: SeverityClass) -> str:
    """Clinical follow-up advice for a severity class"""
    return RECOMMENDATIONS.get(severity, DEFAULT_RECOMMENDATION)


@dataclass(frozen=True)
class ImageDetails:
    """Metadata of the analysed image"""
    original_name: str
    content_type: str
    filename: str
    path: str
    size: int


@dataclass
class RetinaAnalysis:
    """
    Pure domain model for a finished retina analysis.

    Persistence and notification are handled by the caller.
    """
    analysis_id: str
    patient_id: str
    timestamp: datetime
    image_details: ImageDetails
    prediction: PredictionResult
    recommendation: str
    notes: str
    is_simulation: bool
    error_message: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        """Business validations"""
        if not self.patient_id:
            raise ValueError("Patient ID is required")

    @property
    def severity(self) -> str:
        return self.prediction.class_label.value

    @property
    def severity_level(self) -> int:
        return self.prediction.class_label.level
