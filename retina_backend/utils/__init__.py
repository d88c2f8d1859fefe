"""Utility modules for the retina backend application."""

from .datetime_utils import utc_now, to_iso, epoch_ms_to_iso

__all__ = [
    "utc_now",
    "to_iso",
    "epoch_ms_to_iso",
]
