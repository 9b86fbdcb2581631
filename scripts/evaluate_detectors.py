"""
Compare the YIN and autocorrelation detectors on synthetic and recorded audio.

Synthetic mode prints the per-frequency error of both detectors on pure and
noisy tones across the control range, then renders a glide with a pause in
the middle through the full controller and plots the control value trace.

Usage:
    python scripts/evaluate_detectors.py
    python scripts/evaluate_detectors.py voice_*.npy

Output files (in scripts/):
    trace_synthetic.png         - Control value trace for the synthetic glide
    trace_<recording>.png       - Control value trace per recording
"""

import sys
from pathlib import Path

import matplotlib
import numpy as np

matplotlib.use('Agg')
import matplotlib.pyplot as plt

from pitch_control.audio_source import ArrayAudioSource
from pitch_control.autocorrelation_detector import AutocorrelationPitchDetector
from pitch_control.constants import (
    AUTOCORR_BUFFER_SIZE,
    MAX_FREQUENCY,
    MIN_FREQUENCY,
    SAMPLE_RATE,
    YIN_BUFFER_SIZE,
)
from pitch_control.controller import ControllerConfig, PitchController
from pitch_control.detection import DetectorType
from pitch_control.yin_detector import YinPitchDetector

TEST_FREQUENCIES = [110.0, 130.81, 164.81, 196.0, 220.0, 261.63, 329.63, 392.0, 440.0, 523.25]
HOP_SIZE = 735  # 60 frames per second at 44.1 kHz


def generate_tone(frequency: float, num_samples: int, noise: float = 0.0, seed: int = 0) -> np.ndarray:
    """Generate a sine tone with optional white noise."""
    t = np.arange(num_samples) / SAMPLE_RATE
    signal = 0.5 * np.sin(2 * np.pi * frequency * t)
    if noise > 0:
        rng = np.random.default_rng(seed)
        signal += rng.normal(0, noise, num_samples)
    return np.clip(signal, -1.0, 1.0)


def generate_glide(start_hz: float, end_hz: float, seconds: float, pause: float = 0.5) -> np.ndarray:
    """Exponential glide with a silent gap in the middle."""
    half = int(seconds * SAMPLE_RATE / 2)
    freqs = np.geomspace(start_hz, end_hz, 2 * half)
    phase = 2 * np.pi * np.cumsum(freqs) / SAMPLE_RATE
    glide = 0.5 * np.sin(phase)
    gap = np.zeros(int(pause * SAMPLE_RATE))
    return np.concatenate([glide[:half], gap, glide[half:]])


def detector_errors(noise: float) -> list[tuple[float, float | None, float | None]]:
    """Percent error of each detector per test frequency (None = no detection)."""
    detectors = [
        (YinPitchDetector(), YIN_BUFFER_SIZE),
        (AutocorrelationPitchDetector(), AUTOCORR_BUFFER_SIZE),
    ]
    rows = []
    for freq in TEST_FREQUENCIES:
        errors = []
        for detector, frame_size in detectors:
            frame = generate_tone(freq, frame_size, noise=noise)
            estimate = detector.detect(frame, SAMPLE_RATE, MIN_FREQUENCY, MAX_FREQUENCY)
            if estimate is None:
                errors.append(None)
            else:
                errors.append(100.0 * (estimate.frequency - freq) / freq)
        rows.append((freq, errors[0], errors[1]))
    return rows


def print_error_table(noise: float):
    """Print detector errors for one noise level."""
    print(f"\nNoise sigma = {noise:.2f}")
    print(f"{'Freq (Hz)':<10} {'YIN err %':<12} {'Autocorr err %':<14}")
    print("-" * 40)
    for freq, yin_err, ac_err in detector_errors(noise):
        yin_text = f"{yin_err:+.3f}" if yin_err is not None else "--"
        ac_text = f"{ac_err:+.3f}" if ac_err is not None else "--"
        print(f"{freq:<10.2f} {yin_text:<12} {ac_text:<14}")


def controller_trace(samples: np.ndarray, detector_type: DetectorType) -> np.ndarray:
    """Run the controller over a signal and collect the emitted values."""
    source = ArrayAudioSource(samples, sample_rate=SAMPLE_RATE, hop_size=HOP_SIZE)
    values = []
    controller = PitchController(
        source,
        on_value=values.append,
        config=ControllerConfig(detector_type=detector_type),
    )
    with controller:
        while not source.exhausted:
            controller.tick()
    return np.array(values)


def plot_traces(samples: np.ndarray, title: str, filename: Path):
    """Plot controller output for both detectors."""
    fig, ax = plt.subplots(figsize=(12, 4))
    for detector_type in DetectorType:
        trace = controller_trace(samples, detector_type)
        t = np.arange(len(trace)) * HOP_SIZE / SAMPLE_RATE
        ax.plot(t, trace, label=detector_type.value)

    ax.axhline(0.5, color='gray', linestyle='--', linewidth=0.8)
    ax.set_ylim(-0.05, 1.05)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Control value')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(filename, dpi=100)
    plt.close(fig)
    print(f"  Saved: {filename}")


def main():
    """Main evaluation workflow."""
    print("=" * 60)
    print("PITCH DETECTOR EVALUATION")
    print("=" * 60)

    scripts_dir = Path("scripts")
    recordings = [Path(p) for p in sys.argv[1:]]

    if not recordings:
        for noise in (0.0, 0.05, 0.15):
            print_error_table(noise)

        print("\nRendering controller trace for synthetic glide...")
        glide = generate_glide(130.0, 520.0, seconds=4.0)
        plot_traces(glide, "Synthetic glide 130-520 Hz with pause", scripts_dir / "trace_synthetic.png")

    for path in recordings:
        audio = np.load(path).astype(np.float64).flatten()
        print(f"\nAnalyzing {path} ({len(audio) / SAMPLE_RATE:.1f}s)...")
        plot_traces(audio, path.stem, scripts_dir / f"trace_{path.stem}.png")

    print("\nDone!")


if __name__ == "__main__":
    main()
