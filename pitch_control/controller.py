"""
Pitch-to-control-value controller.

This module ties an audio source, a pitch detector and the stabilizer into a
frame-driven loop. The host calls ``tick()`` at its own cadence (a GUI
timer, a plain loop); every tick pulls one frame, runs detection, decides
what raw value (if any) the frame contributes, and reports the smoothed
control value to an observer.

Per-frame states:
- VOICED: the detector found a pitch
- HELD: no pitch this frame, but a recent pitch is still trusted and reused
- FALLBACK: sustained silence; after a grace period the control recentres
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .audio_source import AudioSource, AudioSourceError
from .constants import (
    AUTOCORR_BUFFER_SIZE,
    FALLBACK_GRACE,
    HISTORY_SIZE,
    HOLD_LIMIT,
    MAX_FREQUENCY,
    MAX_PITCH,
    MIN_FREQUENCY,
    MIN_PITCH,
    NEUTRAL_VALUE,
    SMOOTHING,
    YIN_BUFFER_SIZE,
)
from .detection import DetectorType, PitchDetector, PitchEstimate, create_detector
from .stabilizer import PitchStabilizer

logger = logging.getLogger(__name__)

ValueObserver = Callable[[float], None]

# YIN's window taper needs longer frames to resolve low periods
DEFAULT_FRAME_SIZES = {
    DetectorType.YIN: YIN_BUFFER_SIZE,
    DetectorType.AUTOCORRELATION: AUTOCORR_BUFFER_SIZE,
}


class FrameState(Enum):
    """Outcome of a processed frame."""

    IDLE = "idle"  # Nothing processed since start
    VOICED = "voiced"
    HELD = "held"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ControllerConfig:
    """Controller settings, fixed for the lifetime of a controller."""

    min_pitch: float = MIN_PITCH  # Hz mapped to 0.0
    max_pitch: float = MAX_PITCH  # Hz mapped to 1.0
    smoothing: float = SMOOTHING  # Baseline smoothing factor (0, 1)
    history_size: int = HISTORY_SIZE  # Median window (5-7 frames)
    hold_limit: int = HOLD_LIMIT  # Frames to reuse the last pitch
    fallback_grace: int = FALLBACK_GRACE  # Further frames before recentring
    frame_size: int | None = None  # Samples per frame (None = detector default)
    min_frequency: float = MIN_FREQUENCY  # Detector search range (Hz)
    max_frequency: float = MAX_FREQUENCY
    detector_type: DetectorType = DetectorType.YIN

    def __post_init__(self):
        if not 0 < self.min_pitch < self.max_pitch:
            raise ValueError(
                f"Pitch range must satisfy 0 < min < max, got {self.min_pitch}..{self.max_pitch}"
            )
        if not 0.0 < self.smoothing < 1.0:
            raise ValueError(f"Smoothing must be in (0, 1), got {self.smoothing}")
        if not 5 <= self.history_size <= 7:
            raise ValueError(f"History size must be 5-7 frames, got {self.history_size}")
        if self.hold_limit < 0 or self.fallback_grace < 0:
            raise ValueError("Hold limit and fallback grace must be non-negative")
        if self.frame_size is None:
            object.__setattr__(self, "frame_size", DEFAULT_FRAME_SIZES[self.detector_type])
        if self.frame_size <= 0:
            raise ValueError(f"Frame size must be positive, got {self.frame_size}")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"Search range must satisfy 0 < min < max, got {self.min_frequency}..{self.max_frequency}"
            )


@dataclass
class ControllerState:
    """Mutable per-session state. Reset on every start()."""

    smoothed_value: float = NEUTRAL_VALUE
    last_frequency: float | None = None
    silence_frame_count: int = 0
    fallback_frame_count: int = 0
    is_running: bool = False
    frame_state: FrameState = FrameState.IDLE
    last_estimate: PitchEstimate | None = None


class PitchController:
    """
    Frame-driven controller turning detected pitch into a value in [0, 1].

    Not thread-safe: ``tick()`` must not be called concurrently with itself
    or with ``start()``/``stop()``.
    """

    def __init__(
        self,
        source: AudioSource,
        on_value: ValueObserver | None = None,
        config: ControllerConfig | None = None,
        detector: PitchDetector | None = None,
    ):
        """
        Initialize controller.

        Args:
            source: Audio source providing frames
            on_value: Called once per processed frame with the control value
            config: Controller settings (defaults if None)
            detector: Pitch detector (built from config.detector_type if None)
        """
        self.config = config or ControllerConfig()
        self.source = source
        self.on_value = on_value
        self.detector = detector or create_detector(self.config.detector_type)

        self.state = ControllerState()
        self._stabilizer = PitchStabilizer(
            history_size=self.config.history_size,
            smoothing=self.config.smoothing,
        )
        self._frame = np.zeros(self.config.frame_size, dtype=np.float64)

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    @property
    def value(self) -> float:
        """Current smoothed control value."""
        return self.state.smoothed_value

    @property
    def stabilizer(self) -> PitchStabilizer:
        return self._stabilizer

    def normalize(self, frequency: float) -> float:
        """Map a frequency onto [0, 1] between min_pitch and max_pitch."""
        low, high = self.config.min_pitch, self.config.max_pitch
        clamped = max(low, min(high, frequency))
        normalized = (clamped - low) / (high - low)
        return max(0.0, min(1.0, normalized))

    def reset(self):
        """Reset state and history to initial values."""
        self.state = ControllerState()
        self._stabilizer.reset(NEUTRAL_VALUE)
        self._frame[:] = 0.0

    def start(self):
        """
        Reset state and acquire the audio source.

        Does nothing if already running.

        Raises:
            AudioSourceError: If the source cannot be started. The controller
                is left stopped.
        """
        if self.state.is_running:
            return

        self.reset()
        try:
            self.source.start()
        except AudioSourceError:
            logger.warning("Pitch controller failed to start: audio source unavailable")
            self.state.is_running = False
            raise

        self.state.is_running = True
        logger.info(
            "Pitch controller started (%s, %.0f-%.0f Hz, %.0f Hz sample rate)",
            type(self.detector).__name__,
            self.config.min_pitch,
            self.config.max_pitch,
            self.source.sample_rate,
        )

    def stop(self):
        """Stop processing and release the audio source."""
        was_running = self.state.is_running
        self.state.is_running = False
        try:
            self.source.stop()
        finally:
            if was_running:
                logger.info("Pitch controller stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def tick(self) -> float | None:
        """
        Process one frame.

        Returns:
            The emitted control value, or None if the controller is stopped
        """
        if not self.state.is_running:
            return None

        self.source.fill(self._frame)
        estimate = self.detector.detect(
            self._frame,
            self.source.sample_rate,
            self.config.min_frequency,
            self.config.max_frequency,
        )
        return self.process_estimate(estimate)

    def process_estimate(self, estimate: PitchEstimate | None) -> float:
        """
        Advance the state machine with one detection result and emit.

        Args:
            estimate: Detector output for the current frame

        Returns:
            The emitted control value
        """
        state = self.state
        state.last_estimate = estimate
        previous_state = state.frame_state

        raw = self._raw_value(estimate)
        if raw is not None:
            state.smoothed_value = self._stabilizer.push(raw)

        if state.frame_state != previous_state:
            logger.debug(
                "Frame state %s -> %s (silence=%d, fallback=%d)",
                previous_state.value,
                state.frame_state.value,
                state.silence_frame_count,
                state.fallback_frame_count,
            )

        if self.on_value is not None:
            self.on_value(state.smoothed_value)
        return state.smoothed_value

    def _raw_value(self, estimate: PitchEstimate | None) -> float | None:
        """Classify the frame and return its raw normalized value, if any."""
        state = self.state

        if estimate is not None and estimate.frequency > 0:
            state.silence_frame_count = 0
            state.fallback_frame_count = 0
            state.last_frequency = estimate.frequency
            state.frame_state = FrameState.VOICED
            return self.normalize(estimate.frequency)

        if state.last_frequency is not None and state.silence_frame_count < self.config.hold_limit:
            state.silence_frame_count += 1
            state.frame_state = FrameState.HELD
            return self.normalize(state.last_frequency)

        state.silence_frame_count += 1
        state.fallback_frame_count += 1
        state.frame_state = FrameState.FALLBACK
        if state.fallback_frame_count > self.config.fallback_grace:
            state.last_frequency = None
            return NEUTRAL_VALUE
        return None
