"""
YIN pitch detection.

Implements the difference-function pitch estimator from:
    A. de Cheveigné and H. Kawahara, "YIN, a fundamental frequency estimator
    for speech and music," J. Acoust. Soc. Am. 111(4), 2002.

The frame is Hann-windowed before analysis. The difference function is
evaluated for every lag at once from the frame energy and its FFT-based
autocorrelation, which gives the same values as the direct double sum.
"""

import math

import numpy as np
from scipy.signal import fftconvolve

from .constants import (
    MAX_FREQUENCY,
    MIN_FREQUENCY,
    YIN_MIN_CONFIDENCE,
    YIN_MIN_DIFFERENCE,
    YIN_THRESHOLD,
)
from .detection import PitchEstimate


class YinPitchDetector:
    """
    YIN pitch detector with confidence score.

    Steps per frame:
    1. Hann window
    2. Difference function d(tau) over the lag search range
    3. Cumulative mean normalized difference d'(tau)
    4. Absolute threshold: first dip below ``threshold``, followed down to
       its trough
    5. Parabolic interpolation around the trough

    Confidence is ``1 - d'(tau)`` at the chosen lag, 1.0 meaning perfectly
    periodic.
    """

    def __init__(
        self,
        threshold: float = YIN_THRESHOLD,
        min_confidence: float = YIN_MIN_CONFIDENCE,
    ):
        """
        Initialize YIN detector.

        Args:
            threshold: Absolute threshold on the normalized difference
            min_confidence: Estimates below this confidence are discarded
        """
        self.threshold = threshold
        self.min_confidence = min_confidence

        # Per-frame-length buffers, rebuilt only when the frame length changes
        self._size = -1
        self._prepare(0)

    def _prepare(self, size: int):
        if self._size == size:
            return
        self._size = size
        self._window = np.hanning(size)
        self._windowed = np.zeros(size, dtype=np.float64)
        self._squared = np.zeros(size, dtype=np.float64)
        self._energy = np.zeros(size + 1, dtype=np.float64)
        self._taus = np.arange(size, dtype=np.float64)
        self._diff = np.zeros(size, dtype=np.float64)
        self._cmnd = np.zeros(size, dtype=np.float64)
        self._running = np.zeros(size, dtype=np.float64)
        self._scaled = np.zeros(size, dtype=np.float64)
        self._mask = np.zeros(size, dtype=bool)

    def detect(
        self,
        frame: np.ndarray,
        sample_rate: float,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
    ) -> PitchEstimate | None:
        """
        Estimate pitch and confidence for a single frame.

        Args:
            frame: Audio samples in [-1, 1]
            sample_rate: Sample rate in Hz
            min_frequency: Lowest frequency to search for (sets the max lag)
            max_frequency: Highest frequency to search for (sets the min lag)

        Returns:
            PitchEstimate, or None if no confident pitch was found
        """
        size = len(frame)
        if size < 3 or min_frequency <= 0 or max_frequency <= 0:
            return None

        tau_min = max(2, int(math.floor(sample_rate / max_frequency)))
        tau_max = min(int(math.floor(sample_rate / min_frequency)), size - 1)
        if tau_min >= tau_max:
            return None

        self._prepare(size)
        windowed = self._windowed
        np.multiply(frame, self._window, out=windowed)

        diff = self._difference(windowed, tau_max)
        if float(np.sum(diff[1:])) < YIN_MIN_DIFFERENCE:
            return None

        cmnd = self._cumulative_mean_normalized_difference(diff)

        tau = self._absolute_threshold(cmnd, tau_min)
        if tau is None:
            return None

        confidence = 1.0 - float(cmnd[tau])
        if confidence < self.min_confidence:
            return None

        better_tau = float(tau)
        if 0 < tau < len(cmnd) - 1:
            s0, s1, s2 = cmnd[tau - 1], cmnd[tau], cmnd[tau + 1]
            denom = 2.0 * (2.0 * s1 - s2 - s0)
            if denom != 0:
                better_tau = tau + (s2 - s0) / denom

        if better_tau <= 0:
            return None
        frequency = sample_rate / better_tau
        if not math.isfinite(frequency):
            return None

        return PitchEstimate(frequency=float(frequency), confidence=max(0.0, min(1.0, confidence)))

    def _difference(self, windowed: np.ndarray, tau_max: int) -> np.ndarray:
        """
        Difference function d(tau) for tau in [0, tau_max).

        d(tau) = sum_{i < L - tau} (w[i] - w[i + tau])^2
               = E[0, L - tau) + E[tau, L) - 2 r(tau)

        Writes into the detector's buffers; call ``_prepare`` first.
        """
        size = len(windowed)
        energy = self._energy
        np.multiply(windowed, windowed, out=self._squared)
        energy[0] = 0.0
        np.cumsum(self._squared, out=energy[1:])

        diff = self._diff[:tau_max]
        np.subtract(energy[size], energy[:tau_max], out=diff)
        np.add(diff, energy[size - tau_max + 1 : size + 1][::-1], out=diff)

        autocorr = fftconvolve(windowed, windowed[::-1], mode="full")[size - 1 : size - 1 + tau_max]
        np.multiply(autocorr, 2.0, out=autocorr)
        np.subtract(diff, autocorr, out=diff)
        diff[0] = 0.0
        # FFT rounding can leave tiny negatives
        np.maximum(diff, 0.0, out=diff)
        return diff

    def _cumulative_mean_normalized_difference(self, diff: np.ndarray) -> np.ndarray:
        """d'(tau) = d(tau) * tau / sum_{j=1..tau} d(j), and 1 where the sum is zero."""
        n = len(diff)
        cmnd = self._cmnd[:n]
        running_sum = self._running[: n - 1]
        scaled = self._scaled[: n - 1]
        positive = self._mask[: n - 1]

        cmnd.fill(1.0)
        np.cumsum(diff[1:], out=running_sum)
        np.multiply(diff[1:], self._taus[1:n], out=scaled)
        np.greater(running_sum, 0.0, out=positive)
        np.divide(scaled, running_sum, out=cmnd[1:], where=positive)
        return cmnd

    def _absolute_threshold(self, cmnd: np.ndarray, tau_min: int) -> int | None:
        """First lag below threshold, advanced to the bottom of its dip."""
        candidates = cmnd[tau_min:]
        if len(candidates) == 0:
            return None
        below = self._mask[: len(candidates)]
        np.less(candidates, self.threshold, out=below)
        first = int(np.argmax(below))
        if not below[first]:
            return None

        tau = tau_min + first
        while tau + 1 < len(cmnd) and cmnd[tau + 1] < cmnd[tau]:
            tau += 1
        return tau
