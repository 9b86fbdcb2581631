"""
Audio sources feeding fixed-size frames to the controller.

A source owns the capture device. The controller calls ``start()`` once,
then ``fill(buffer)`` every tick to overwrite its reused frame buffer with
the most recent samples, and ``stop()`` to release the device.
"""

import logging
import threading
from typing import Any, Protocol

import numpy as np

from .constants import BLOCK_SIZE, BUFFER_SIZE, SAMPLE_RATE

logger = logging.getLogger(__name__)


class AudioSourceError(RuntimeError):
    """The audio device could not be opened (no device, permission denied, ...)."""


class AudioSource(Protocol):
    @property
    def sample_rate(self) -> float: ...

    def start(self) -> Any: ...

    def stop(self) -> None: ...

    def fill(self, buffer: np.ndarray) -> None: ...


def list_input_devices() -> list[tuple[int, str]]:
    """
    List available input devices.

    Returns:
        (device index, device name) for every device with input channels

    Raises:
        AudioSourceError: If PortAudio is unavailable
    """
    try:
        import sounddevice as sd

        devices = sd.query_devices()
    except (OSError, RuntimeError) as e:
        raise AudioSourceError(f"Cannot query audio devices: {e}") from e

    return [
        (i, device["name"])
        for i, device in enumerate(devices)
        if device["max_input_channels"] > 0
    ]


class SoundDeviceSource:
    """
    Microphone input through a mono sounddevice InputStream.

    The stream callback runs on the PortAudio thread and appends each block
    to a rolling buffer holding the last ``frame_size`` samples. ``fill``
    copies that buffer out under the same lock.
    """

    def __init__(
        self,
        device: int | None = None,
        sample_rate: int = SAMPLE_RATE,
        block_size: int = BLOCK_SIZE,
        frame_size: int = BUFFER_SIZE,
    ):
        """
        Initialize source.

        Args:
            device: sounddevice input device index (None = system default)
            sample_rate: Requested sample rate in Hz
            block_size: Samples per callback block
            frame_size: Samples kept for each analysed frame
        """
        self.device = device
        self.block_size = block_size
        self.frame_size = frame_size
        self._sample_rate = float(sample_rate)

        self._stream = None
        self._lock = threading.Lock()
        self._ring = np.zeros(frame_size, dtype=np.float64)

    @property
    def sample_rate(self) -> float:
        """Active sample rate (the stream's actual rate once started)."""
        return self._sample_rate

    @property
    def is_active(self) -> bool:
        return self._stream is not None

    def start(self):
        """
        Open and start the input stream.

        Returns:
            The running sounddevice InputStream

        Raises:
            AudioSourceError: If the device cannot be opened
        """
        if self._stream is not None:
            return self._stream

        try:
            import sounddevice as sd
        except OSError as e:
            raise AudioSourceError(f"PortAudio library not available: {e}") from e

        with self._lock:
            self._ring[:] = 0.0

        stream = None
        try:
            stream = sd.InputStream(
                device=self.device,
                samplerate=self._sample_rate,
                blocksize=self.block_size,
                channels=1,
                dtype=np.float32,
                callback=self._audio_callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            if stream is not None:
                stream.close()
            raise AudioSourceError(f"Cannot open audio input: {e}") from e

        self._stream = stream
        self._sample_rate = float(stream.samplerate)
        logger.info(
            "Audio input started (device=%s, %.0f Hz, block=%d)",
            self.device if self.device is not None else "default",
            self._sample_rate,
            self.block_size,
        )
        return stream

    def stop(self):
        """Stop and close the input stream."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
            logger.info("Audio input stopped")

    def fill(self, buffer: np.ndarray):
        """Overwrite ``buffer`` with the most recent samples."""
        with self._lock:
            n = min(len(buffer), self.frame_size)
            buffer[-n:] = self._ring[-n:]
            if n < len(buffer):
                buffer[:-n] = 0.0

    def _audio_callback(self, indata, frames, time, status):
        """Audio callback - push incoming block into the rolling buffer."""
        if status:
            logger.warning("Audio input status: %s", status)

        block = indata[:, 0]
        n = min(len(block), self.frame_size)
        with self._lock:
            self._ring[:-n] = self._ring[n:]
            self._ring[-n:] = block[-n:]


class ArrayAudioSource:
    """
    Replays a recorded or synthesized signal one frame per ``fill``.

    Each fill advances the read position by ``hop_size`` samples. Frames that
    extend past the end of the signal are zero-padded, so a finished source
    produces silence.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: float = SAMPLE_RATE,
        hop_size: int | None = None,
    ):
        """
        Initialize source.

        Args:
            samples: Mono signal in [-1, 1]
            sample_rate: Sample rate of ``samples`` in Hz
            hop_size: Samples to advance per frame (None = frame length)
        """
        self.samples = np.asarray(samples, dtype=np.float64)
        self.hop_size = hop_size
        self._sample_rate = float(sample_rate)
        self._position = 0
        self._started = False

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def position(self) -> int:
        """Read position in samples."""
        return self._position

    @property
    def is_active(self) -> bool:
        return self._started

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self.samples)

    def start(self):
        self._position = 0
        self._started = True
        return self

    def stop(self):
        self._started = False

    def fill(self, buffer: np.ndarray):
        size = len(buffer)
        chunk = self.samples[self._position : self._position + size]
        buffer[: len(chunk)] = chunk
        buffer[len(chunk) :] = 0.0
        self._position += self.hop_size or size
