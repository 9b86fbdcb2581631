"""
Time-domain autocorrelation pitch detector.

Compares the first half of the frame against shifted copies of itself using
a normalized mean absolute difference, and reports the first correlation
peak that rises above a fixed floor. Cheap to reason about and free of
windowing, but more prone to octave errors than YIN and without a
confidence score.
"""

import math

import numpy as np

from .constants import AUTOCORR_REFINE_FACTOR, AUTOCORR_THRESHOLD, SILENCE_RMS
from .detection import PitchEstimate


class AutocorrelationPitchDetector:
    """
    Autocorrelation pitch detector.

    For each offset tau in [0, N) with N = len(frame) // 2:

        c(tau) = 1 - sum(|x[i] - x[i + tau]|) / N

    The scan stops at the first local maximum above ``threshold`` that was
    reached on a rising edge. The period is refined using the slope just
    after the peak.
    """

    def __init__(
        self,
        threshold: float = AUTOCORR_THRESHOLD,
        silence_rms: float = SILENCE_RMS,
        refine_factor: float = AUTOCORR_REFINE_FACTOR,
    ):
        """
        Initialize detector.

        Args:
            threshold: Minimum correlation for a peak candidate
            silence_rms: Frames with lower RMS are treated as silence
            refine_factor: Multiplier applied to the post-peak slope
        """
        self.threshold = threshold
        self.silence_rms = silence_rms
        self.refine_factor = refine_factor

        self._scratch = np.zeros(0, dtype=np.float64)

    def _scratch_for(self, size: int) -> np.ndarray:
        if self._scratch.size < size:
            self._scratch = np.zeros(size, dtype=np.float64)
        return self._scratch[:size]

    def detect(
        self,
        frame: np.ndarray,
        sample_rate: float,
        min_frequency: float | None = None,
        max_frequency: float | None = None,
    ) -> PitchEstimate | None:
        """
        Estimate the dominant frequency of a frame.

        The search bounds are accepted for interface compatibility; this
        detector always scans the full half-frame.

        Args:
            frame: Audio samples in [-1, 1]
            sample_rate: Sample rate in Hz

        Returns:
            PitchEstimate without confidence, or None if no pitch was found
        """
        size = len(frame)
        max_samples = size // 2
        if max_samples == 0:
            return None

        rms = math.sqrt(float(np.dot(frame, frame)) / size)
        if rms < self.silence_rms:
            return None

        scratch = self._scratch_for(max_samples)
        head = frame[:max_samples]

        best_offset = -1
        best_correlation = 0.0
        last_correlation = 1.0
        found_good_correlation = False

        for offset in range(max_samples):
            np.subtract(head, frame[offset : offset + max_samples], out=scratch)
            np.abs(scratch, out=scratch)
            correlation = 1.0 - float(scratch.sum()) / max_samples

            if correlation > self.threshold and correlation > last_correlation:
                found_good_correlation = True
                if correlation > best_correlation:
                    best_correlation = correlation
                    best_offset = offset
            elif found_good_correlation:
                shift = (correlation - last_correlation) / best_correlation
                return self._estimate(sample_rate, best_offset + self.refine_factor * shift)
            last_correlation = correlation

        if best_correlation > 0.01:
            return self._estimate(sample_rate, best_offset)

        return None

    @staticmethod
    def _estimate(sample_rate: float, period: float) -> PitchEstimate | None:
        if period <= 0:
            return None
        frequency = sample_rate / period
        if not math.isfinite(frequency):
            return None
        return PitchEstimate(frequency=frequency)
