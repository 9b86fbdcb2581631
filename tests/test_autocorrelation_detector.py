"""
Tests for AutocorrelationPitchDetector using synthetic signals.
"""

import numpy as np
import pytest

from pitch_control import SAMPLE_RATE
from pitch_control.autocorrelation_detector import AutocorrelationPitchDetector
from pitch_control.constants import AUTOCORR_BUFFER_SIZE

# Spans the default control range (110-550 Hz)
TEST_FREQUENCIES = [110.0, 130.81, 220.0, 261.63, 330.0, 440.0, 523.25, 550.0]


def generate_sine_wave(
    frequency: float,
    duration_samples: int = AUTOCORR_BUFFER_SIZE,
    sample_rate: int = SAMPLE_RATE,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Generate a sine wave at the given frequency."""
    t = np.arange(duration_samples) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float64)


class TestAutocorrelationBasic:
    """Basic pitch detection tests with pure sine waves."""

    def setup_method(self):
        """Create a fresh detector for each test."""
        self.detector = AutocorrelationPitchDetector()

    @pytest.mark.parametrize("frequency", TEST_FREQUENCIES)
    def test_sine_within_two_percent(self, frequency):
        """Pure tones across the control range are found within 2%."""
        estimate = self.detector.detect(generate_sine_wave(frequency), SAMPLE_RATE)

        assert estimate is not None, f"Should detect {frequency} Hz"
        assert estimate.frequency == pytest.approx(frequency, rel=0.02)

    def test_no_confidence(self):
        """The autocorrelation detector does not report a confidence."""
        estimate = self.detector.detect(generate_sine_wave(440.0), SAMPLE_RATE)

        assert estimate is not None
        assert estimate.confidence is None

    def test_bounds_are_ignored(self):
        """Search bounds are accepted but do not change the result."""
        frame = generate_sine_wave(330.0)
        unbounded = self.detector.detect(frame, SAMPLE_RATE)
        bounded = self.detector.detect(frame, SAMPLE_RATE, 60.0, 1200.0)

        assert unbounded == bounded

    def test_other_sample_rate(self):
        """Frequencies scale with the sample rate passed in."""
        frame = generate_sine_wave(300.0, sample_rate=48000)
        estimate = self.detector.detect(frame, 48000)

        assert estimate is not None
        assert estimate.frequency == pytest.approx(300.0, rel=0.02)


class TestAutocorrelationNoDetection:
    """Cases that must return no estimate."""

    def setup_method(self):
        self.detector = AutocorrelationPitchDetector()

    def test_silence(self):
        """All-zero frame yields no detection."""
        assert self.detector.detect(np.zeros(AUTOCORR_BUFFER_SIZE), SAMPLE_RATE) is None

    def test_below_rms_gate(self):
        """A tone quieter than the RMS gate is treated as silence."""
        frame = generate_sine_wave(440.0, amplitude=0.01)  # RMS ~0.007
        assert self.detector.detect(frame, SAMPLE_RATE) is None

    def test_white_noise(self):
        """Noise never produces a correlation peak above the floor."""
        rng = np.random.default_rng(3)
        frame = rng.normal(0, 0.3, AUTOCORR_BUFFER_SIZE)
        assert self.detector.detect(frame, SAMPLE_RATE) is None

    def test_empty_frame(self):
        assert self.detector.detect(np.zeros(1), SAMPLE_RATE) is None
