# Standard library imports
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SeverityClass(str, Enum):
    """Diabetic-retinopathy severity labels, ordered from healthy to worst"""
    NO_DR = "No DR"
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"
    PROLIFERATIVE_DR = "Proliferative DR"

    @property
    def level(self) -> int:
        """Ordinal severity level (0 = No DR, 4 = Proliferative DR)"""
        return list(SeverityClass).index(self)

    @classmethod
    def from_label(cls, label: str) -> Optional["SeverityClass"]:
        """Look up a class by the label the inference service returns"""
        for member in cls:
            if member.value == label:
                return member
        return None


@dataclass(frozen=True)
class PredictionResult:
    """
    Pure domain model for one classification outcome.

    Produced once per prediction, either by the remote model or by the
    local simulation fallback (is_simulation=True).
    """
    class_label: SeverityClass
    confidence: float
    is_simulation: bool = False

    def __post_init__(self) -> None:
        """Business validations"""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class FileRef:
    """Reference to an image already stored on disk"""
    path: str
    filename: str
    original_name: Optional[str] = None
    content_type: str = "image/jpeg"
    size: int = 0


@dataclass(frozen=True)
class InlineImagePayload:
    """Image embedded as a data URL (data:image/...;base64,<payload>)"""
    data_url: str


ImageInput = Union[FileRef, InlineImagePayload]
