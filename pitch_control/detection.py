"""
Common detector interface and factory.

Both detectors take a single frame of samples and return a PitchEstimate,
or None when no periodicity could be found (silence, noise, degenerate
search range). No-detection is a normal outcome, not an error.
"""

from enum import Enum
from typing import NamedTuple, Protocol

import numpy as np


class PitchEstimate(NamedTuple):
    """Single-frame pitch estimate."""
    frequency: float  # Hz, > 0
    confidence: float | None = None  # 0.0 to 1.0 (YIN only)


class PitchDetector(Protocol):
    def detect(
        self,
        frame: np.ndarray,
        sample_rate: float,
        min_frequency: float,
        max_frequency: float,
    ) -> PitchEstimate | None: ...


class DetectorType(Enum):
    """Type of pitch detection algorithm."""

    YIN = "yin"  # YIN difference function (default, reports confidence)
    AUTOCORRELATION = "autocorrelation"  # Mean absolute difference autocorrelation


def create_detector(detector_type: DetectorType) -> PitchDetector:
    """Create a pitch detector of the specified type."""
    # Detector modules import PitchEstimate from this module
    from .autocorrelation_detector import AutocorrelationPitchDetector
    from .yin_detector import YinPitchDetector

    if detector_type == DetectorType.AUTOCORRELATION:
        return AutocorrelationPitchDetector()
    return YinPitchDetector()
