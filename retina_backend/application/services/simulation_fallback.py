"""Local stand-in predictions used when the inference service is unreachable."""
import logging
import random
from typing import Optional, Protocol, Sequence, Tuple

from ...domain.models.prediction import PredictionResult, SeverityClass

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float:
        ...


# Upper bound (exclusive) of each class's share of [0, 1), skewed toward milder disease
CLASS_THRESHOLDS: Sequence[Tuple[float, SeverityClass]] = (
    (0.45, SeverityClass.NO_DR),
    (0.65, SeverityClass.MILD),
    (0.85, SeverityClass.MODERATE),
    (0.95, SeverityClass.SEVERE),
    (1.0, SeverityClass.PROLIFERATIVE_DR),
)

MIN_CONFIDENCE = 0.70
CONFIDENCE_SPAN = 0.30
MAX_CONFIDENCE = 0.9999


def severity_for_draw(value: float) -> SeverityClass:
    """Map a uniform draw in [0, 1) onto a severity class"""
    for upper_bound, severity in CLASS_THRESHOLDS:
        if value < upper_bound:
            return severity
    return SeverityClass.PROLIFERATIVE_DR


class SimulationFallback:
    """
    Synthesizes a plausible classification without a model.

    Results are always flagged with is_simulation=True so downstream
    consumers can tell them apart from real predictions.
    """

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        """
        Args:
            rng: Source of uniform draws in [0, 1); tests inject a seeded or
                scripted one
        """
        self._rng = rng or random.Random()

    def simulate(self) -> PredictionResult:
        severity = severity_for_draw(self._rng.random())
        confidence = min(round(MIN_CONFIDENCE + self._rng.random() * CONFIDENCE_SPAN, 4), MAX_CONFIDENCE)

        logger.info(f"SIMULATED PREDICTION: {severity.value} with confidence {confidence:.2f}")

        return PredictionResult(
            class_label=severity,
            confidence=confidence,
            is_simulation=True,
        )
