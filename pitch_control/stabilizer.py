"""
Temporal stabilization of normalized pitch values.

This module turns a jittery stream of per-frame control values into a steady
one. A short median filter rejects single-frame outliers (octave jumps,
spurious detections), and an exponential smoother follows the median with a
factor that grows with the size of the jump, so genuine pitch changes are
tracked quickly while small wobbles stay quiet.
"""

from collections import deque

import numpy as np

from .constants import (
    HISTORY_SIZE,
    NEUTRAL_VALUE,
    SMOOTHING,
    SMOOTHING_FLOOR,
    SMOOTHING_TIERS,
)


class PitchStabilizer:
    """
    Median + dynamic exponential smoother for values in [0, 1].

    Each push:
    - appends the raw value to a bounded history
    - takes the median of the history
    - moves the output toward the median by a factor alpha chosen from the
      distance between median and current output
    """

    def __init__(
        self,
        history_size: int = HISTORY_SIZE,
        smoothing: float = SMOOTHING,
        tiers: tuple[tuple[float, float], ...] = SMOOTHING_TIERS,
        initial_value: float = NEUTRAL_VALUE,
    ):
        """
        Initialize stabilizer.

        Args:
            history_size: Number of recent values kept for the median
            smoothing: Baseline smoothing factor used for small changes
            tiers: (delta threshold, alpha) pairs for larger changes
            initial_value: Output value before any push
        """
        self.history_size = history_size
        self.smoothing = smoothing
        self._tiers = tuple(sorted(tiers))
        self._history: deque[float] = deque(maxlen=history_size)
        self._value = initial_value

    def smoothing_factor(self, delta: float) -> float:
        """
        Select the smoothing factor for a given distance to the median.

        Tiers can only raise alpha, so a larger delta never gets a smaller
        factor than a smaller delta.
        """
        alpha = max(self.smoothing, SMOOTHING_FLOOR)
        for threshold, tier_alpha in self._tiers:
            if delta > threshold:
                alpha = max(alpha, tier_alpha)
        return alpha

    def push(self, raw: float) -> float:
        """Add a raw normalized value and return the new stabilized value."""
        self._history.append(raw)
        median = self.median

        delta = abs(median - self._value)
        alpha = self.smoothing_factor(delta)
        self._value = self._value + (median - self._value) * alpha
        return self._value

    def reset(self, value: float = NEUTRAL_VALUE):
        """Clear history and set the output back to ``value``."""
        self._history.clear()
        self._value = value

    @property
    def median(self) -> float:
        """Median of the current history (current value if empty)."""
        if not self._history:
            return self._value
        return float(np.median(self._history))

    @property
    def value(self) -> float:
        """Most recent stabilized value."""
        return self._value

    @property
    def sample_count(self) -> int:
        """Number of values currently in history."""
        return len(self._history)
