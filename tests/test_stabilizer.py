"""Tests for the pitch stabilizer module."""

import numpy as np
import pytest

from pitch_control.stabilizer import PitchStabilizer


class TestMedian:
    """Tests for the median over the bounded history."""

    def test_empty_history_uses_current_value(self):
        """Empty stabilizer reports its current value as median."""
        stabilizer = PitchStabilizer()
        assert stabilizer.median == pytest.approx(0.5)
        assert stabilizer.sample_count == 0

    def test_even_length_median(self):
        """Even-length history: mean of the two middle values."""
        stabilizer = PitchStabilizer(history_size=5)
        stabilizer.push(0.2)
        stabilizer.push(0.8)
        assert stabilizer.median == pytest.approx(0.5)

    def test_odd_length_median(self):
        """Odd-length history: middle sorted element."""
        stabilizer = PitchStabilizer(history_size=5)
        for value in (0.1, 0.9, 0.2):
            stabilizer.push(value)
        assert stabilizer.median == pytest.approx(0.2)

    def test_history_size_limit(self):
        """Oldest values are evicted beyond the history size."""
        stabilizer = PitchStabilizer(history_size=5)
        stabilizer.push(0.9)  # Will be pushed out
        for _ in range(5):
            stabilizer.push(0.1)

        assert stabilizer.sample_count == 5
        assert stabilizer.median == pytest.approx(0.1)

    def test_outlier_rejection(self):
        """A single outlier does not move the median."""
        stabilizer = PitchStabilizer(history_size=5)
        for value in (0.3, 0.3, 1.0, 0.3, 0.3):
            stabilizer.push(value)
        assert stabilizer.median == pytest.approx(0.3)


class TestSmoothingFactor:
    """Tests for the dynamic smoothing factor."""

    def test_tiers(self):
        """Large, medium and small changes use the tiered factors."""
        stabilizer = PitchStabilizer(smoothing=0.15)
        assert stabilizer.smoothing_factor(0.5) == pytest.approx(0.85)
        assert stabilizer.smoothing_factor(0.3) == pytest.approx(0.55)
        assert stabilizer.smoothing_factor(0.05) == pytest.approx(0.18)

    def test_baseline_above_floor(self):
        """A baseline above the floor is used for small changes."""
        stabilizer = PitchStabilizer(smoothing=0.25)
        assert stabilizer.smoothing_factor(0.01) == pytest.approx(0.25)

    @pytest.mark.parametrize("smoothing", [0.05, 0.18, 0.4, 0.7, 0.95])
    def test_monotonic_in_delta(self, smoothing):
        """A larger delta never selects a smaller factor."""
        stabilizer = PitchStabilizer(smoothing=smoothing)
        deltas = np.linspace(0.0, 1.0, 201)
        alphas = [stabilizer.smoothing_factor(d) for d in deltas]

        assert all(a1 <= a2 for a1, a2 in zip(alphas, alphas[1:]))


class TestPush:
    """Tests for the push/update cycle."""

    def test_small_change_uses_baseline(self):
        """Small move toward the median uses the baseline factor."""
        stabilizer = PitchStabilizer(smoothing=0.15)
        value = stabilizer.push(0.55)
        assert value == pytest.approx(0.5 + 0.05 * 0.18)

    def test_medium_change(self):
        stabilizer = PitchStabilizer(smoothing=0.15)
        value = stabilizer.push(0.7)
        assert value == pytest.approx(0.5 + 0.2 * 0.55)

    def test_large_change_tracks_fast(self):
        stabilizer = PitchStabilizer(smoothing=0.15)
        value = stabilizer.push(1.0)
        assert value == pytest.approx(0.5 + 0.5 * 0.85)

    def test_converges_to_constant_input(self):
        """Repeated identical input converges to that input."""
        stabilizer = PitchStabilizer()
        for _ in range(100):
            value = stabilizer.push(0.8)
        assert value == pytest.approx(0.8, abs=1e-4)
        assert stabilizer.value == value

    def test_output_stays_in_unit_range(self):
        """Random inputs in [0, 1] never produce output outside [0, 1]."""
        rng = np.random.default_rng(0)
        stabilizer = PitchStabilizer(smoothing=0.9)
        for raw in rng.uniform(0.0, 1.0, 500):
            value = stabilizer.push(float(raw))
            assert 0.0 <= value <= 1.0

    def test_reset(self):
        """Reset clears history and re-centres."""
        stabilizer = PitchStabilizer()
        stabilizer.push(0.9)
        stabilizer.push(0.9)

        stabilizer.reset()
        assert stabilizer.sample_count == 0
        assert stabilizer.value == pytest.approx(0.5)

    def test_reset_to_value(self):
        stabilizer = PitchStabilizer()
        stabilizer.reset(0.2)
        assert stabilizer.value == pytest.approx(0.2)
