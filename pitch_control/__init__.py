"""
pitch_control - Voice pitch detection mapped to a smoothed control value
"""

from .audio_source import ArrayAudioSource, AudioSource, AudioSourceError, SoundDeviceSource
from .autocorrelation_detector import AutocorrelationPitchDetector
from .constants import BUFFER_SIZE, MAX_PITCH, MIN_PITCH, NEUTRAL_VALUE, SAMPLE_RATE
from .controller import (
    ControllerConfig,
    ControllerState,
    FrameState,
    PitchController,
)
from .detection import DetectorType, PitchDetector, PitchEstimate, create_detector
from .stabilizer import PitchStabilizer
from .yin_detector import YinPitchDetector

__version__ = "0.1.0"
__all__ = [
    "PitchController",
    "ControllerConfig",
    "ControllerState",
    "FrameState",
    "PitchStabilizer",
    "YinPitchDetector",
    "AutocorrelationPitchDetector",
    "PitchDetector",
    "PitchEstimate",
    "DetectorType",
    "create_detector",
    "AudioSource",
    "AudioSourceError",
    "SoundDeviceSource",
    "ArrayAudioSource",
    "SAMPLE_RATE",
    "BUFFER_SIZE",
    "MIN_PITCH",
    "MAX_PITCH",
    "NEUTRAL_VALUE",
]
