"""
Shared constants for pitch detection and control mapping.
"""

# Audio capture
SAMPLE_RATE = 44100
YIN_BUFFER_SIZE = 4096  # Long enough for YIN to resolve periods down to 110 Hz
AUTOCORR_BUFFER_SIZE = 2048  # Autocorrelation scans half the frame, O(N^2)
BUFFER_SIZE = YIN_BUFFER_SIZE  # Default capture frame
BLOCK_SIZE = 512  # Samples per sounddevice callback

# Control range (Hz) mapped linearly onto [0, 1]
MIN_PITCH = 110.0
MAX_PITCH = 550.0
NEUTRAL_VALUE = 0.5

# YIN search range (Hz), wider than the control range so edge pitches still resolve
MIN_FREQUENCY = 60.0
MAX_FREQUENCY = 1200.0

# Detector thresholds
SILENCE_RMS = 0.01
AUTOCORR_THRESHOLD = 0.9
AUTOCORR_REFINE_FACTOR = 8.0
YIN_THRESHOLD = 0.12
YIN_MIN_CONFIDENCE = 0.1
YIN_MIN_DIFFERENCE = 1e-9

# Stabilizer
HISTORY_SIZE = 5
SMOOTHING = 0.18
SMOOTHING_FLOOR = 0.18
SMOOTHING_TIERS = (
    (0.15, 0.55),  # (delta above, alpha)
    (0.4, 0.85),
)

# Controller state machine (frame counts)
HOLD_LIMIT = 6
FALLBACK_GRACE = 10
