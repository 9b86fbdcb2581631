"""
GUI components for pitch control
"""

from .control_meter import ControlMeter
from .pitch_window import PitchWindow, main

__all__ = ["ControlMeter", "PitchWindow", "main"]
