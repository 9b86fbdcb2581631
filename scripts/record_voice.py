"""
Record a voice take and report how the pitch controller responds to it.

This script records:
1. A low hum (bottom of your comfortable range)
2. A high hum (top of your comfortable range)
3. A free take (glides, pauses, speech)

Then analyzes the recordings to:
- Suggest min/max pitch bounds from the low and high hums
- Summarize controller output on the free take (time spent voiced, held,
  and recentring)

Usage:
    python scripts/record_voice.py

Output files (in current directory):
    voice_low_<timestamp>.npy     - Low hum
    voice_high_<timestamp>.npy    - High hum
    voice_free_<timestamp>.npy    - Free take
    report_voice_<timestamp>.json - Analysis report
"""

import json
import time
from collections import Counter
from datetime import datetime
from pathlib import Path

import numpy as np

from pitch_control.audio_source import ArrayAudioSource
from pitch_control.constants import MAX_FREQUENCY, MIN_FREQUENCY, SAMPLE_RATE, YIN_BUFFER_SIZE
from pitch_control.controller import ControllerConfig, PitchController
from pitch_control.yin_detector import YinPitchDetector

HOP_SIZE = 735  # 60 frames per second at 44.1 kHz


def wait_for_enter(prompt: str) -> None:
    """Wait for user to press Enter."""
    input(f"\n{prompt}")


def countdown(seconds: int = 3) -> None:
    """Countdown before recording."""
    for i in range(seconds, 0, -1):
        print(f"{i}...", end=" ", flush=True)
        time.sleep(1)
    print("GO!")


def record_audio(duration: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Record mono audio for the given duration."""
    import sounddevice as sd

    num_samples = int(duration * sample_rate)
    print(f"Recording {duration}s at {sample_rate}Hz...")

    audio = sd.rec(num_samples, samplerate=sample_rate, channels=1, dtype='float64')
    sd.wait()

    return audio.flatten()


def save_recording(audio: np.ndarray, filename: str) -> Path:
    """Save audio recording to a .npy file."""
    filepath = Path(filename)
    np.save(filepath, audio)
    print(f"Saved: {filepath} ({len(audio)} samples, {len(audio)/SAMPLE_RATE:.1f}s)")
    return filepath


def median_pitch(audio: np.ndarray) -> float | None:
    """Median YIN pitch over all confident frames of a recording."""
    detector = YinPitchDetector()
    pitches = []
    for i in range(0, len(audio) - YIN_BUFFER_SIZE, HOP_SIZE):
        estimate = detector.detect(audio[i:i + YIN_BUFFER_SIZE], SAMPLE_RATE, MIN_FREQUENCY, MAX_FREQUENCY)
        if estimate is not None:
            pitches.append(estimate.frequency)
    if not pitches:
        return None
    return float(np.median(pitches))


def analyze_free_take(audio: np.ndarray, config: ControllerConfig) -> dict:
    """Run the controller over a take and summarize its output."""
    source = ArrayAudioSource(audio, sample_rate=SAMPLE_RATE, hop_size=HOP_SIZE)
    controller = PitchController(source, config=config)
    values = []
    states = Counter()

    with controller:
        while not source.exhausted:
            values.append(controller.tick())
            states[controller.state.frame_state.value] += 1

    values = np.array(values)
    total = max(1, len(values))
    return {
        "frames": len(values),
        "state_fractions": {state: count / total for state, count in states.items()},
        "value_min": float(values.min()) if len(values) else None,
        "value_max": float(values.max()) if len(values) else None,
        "value_mean": float(values.mean()) if len(values) else None,
        "mean_abs_step": float(np.mean(np.abs(np.diff(values)))) if len(values) > 1 else 0.0,
    }


def print_report_summary(report: dict) -> None:
    """Print a human-readable summary of the report."""
    print("\n" + "=" * 60)
    print("VOICE ANALYSIS REPORT")
    print("=" * 60)

    bounds = report["suggested_bounds"]
    print(f"\nTimestamp: {report['timestamp']}")
    if bounds["min_pitch"] is not None and bounds["max_pitch"] is not None:
        print(f"Suggested range: {bounds['min_pitch']:.1f} - {bounds['max_pitch']:.1f} Hz")
    else:
        print("Suggested range: not detected (using defaults)")

    take = report["free_take"]
    print(f"\nFree take: {take['frames']} frames")
    for state, fraction in sorted(take["state_fractions"].items()):
        print(f"  {state:<10} {fraction:6.1%}")
    if take["value_min"] is not None:
        print(f"  Value range: {take['value_min']:.3f} - {take['value_max']:.3f}")
    print(f"  Mean step per frame: {take['mean_abs_step']:.4f}")
    print("\n" + "=" * 60)


def main():
    """Main recording and analysis workflow."""
    print("=" * 60)
    print("VOICE RECORDING SCRIPT")
    print("=" * 60)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    takes = {}

    for step, (name, prompt, duration) in enumerate(
        [
            ("low", "Hum your LOWEST comfortable note", 3.0),
            ("high", "Hum your HIGHEST comfortable note", 3.0),
            ("free", "Glide up and down, pause, talk", 10.0),
        ],
        start=1,
    ):
        print("\n" + "-" * 60)
        print(f"STEP {step}: {prompt}")
        print("-" * 60)
        wait_for_enter("Press Enter when ready...")
        countdown()
        takes[name] = record_audio(duration)
        save_recording(takes[name], f"voice_{name}_{timestamp}.npy")

    print("\nAnalyzing recordings...")
    low = median_pitch(takes["low"])
    high = median_pitch(takes["high"])

    config = ControllerConfig()
    if low is not None and high is not None and low < high:
        config = ControllerConfig(min_pitch=low, max_pitch=high)

    report = {
        "timestamp": datetime.now().isoformat(),
        "sample_rate": SAMPLE_RATE,
        "suggested_bounds": {"min_pitch": low, "max_pitch": high},
        "free_take": analyze_free_take(takes["free"], config),
    }

    report_file = f"report_voice_{timestamp}.json"
    with open(report_file, 'w') as f:
        json.dump(report, f, indent=2)
    print(f"\nReport saved: {report_file}")

    print_report_summary(report)
    print("\nDone!")


if __name__ == "__main__":
    main()
