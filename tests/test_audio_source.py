"""
Tests for audio sources.

SoundDeviceSource is exercised against a stand-in ``sounddevice`` module so
the tests run without audio hardware or PortAudio.
"""

import sys
import types

import numpy as np
import pytest

from pitch_control.audio_source import ArrayAudioSource, AudioSourceError, SoundDeviceSource


class FakePortAudioError(Exception):
    pass


class FakeStream:
    """Minimal InputStream replacement recording lifecycle calls."""

    instances = []

    def __init__(self, device=None, samplerate=None, blocksize=None, channels=None, dtype=None, callback=None):
        self.samplerate = samplerate
        self.callback = callback
        self.started = False
        self.closed = False
        FakeStream.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


class FailingStartStream(FakeStream):
    def start(self):
        raise FakePortAudioError("Device unavailable")


@pytest.fixture
def fake_sounddevice(monkeypatch):
    """Install a stand-in sounddevice module."""
    FakeStream.instances = []
    module = types.ModuleType("sounddevice")
    module.PortAudioError = FakePortAudioError
    module.InputStream = FakeStream
    module.query_devices = lambda: [
        {"name": "Speakers", "max_input_channels": 0},
        {"name": "USB Mic", "max_input_channels": 1},
    ]
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    return module


class TestArrayAudioSource:
    """Tests for replaying arrays frame by frame."""

    def test_fill_advances_by_hop(self):
        samples = np.arange(10, dtype=np.float64)
        source = ArrayAudioSource(samples, hop_size=2)
        source.start()
        buffer = np.zeros(4)

        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [0, 1, 2, 3])
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [2, 3, 4, 5])

    def test_zero_pads_past_end(self):
        source = ArrayAudioSource(np.ones(5), hop_size=4)
        source.start()
        buffer = np.full(4, 9.0)

        source.fill(buffer)
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [1, 0, 0, 0])
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [0, 0, 0, 0])
        assert source.exhausted

    def test_default_hop_is_frame_length(self):
        source = ArrayAudioSource(np.arange(8, dtype=np.float64))
        source.start()
        buffer = np.zeros(4)
        source.fill(buffer)
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [4, 5, 6, 7])

    def test_start_rewinds(self):
        source = ArrayAudioSource(np.arange(8, dtype=np.float64), hop_size=4)
        source.start()
        source.fill(np.zeros(4))
        source.start()
        assert source.position == 0


class TestSoundDeviceSource:
    """Tests for microphone capture."""

    def test_fill_before_audio_is_silent(self):
        source = SoundDeviceSource(frame_size=8)
        buffer = np.ones(8)
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, np.zeros(8))

    def test_callback_keeps_latest_samples(self):
        """Blocks are appended to a rolling buffer of the last frame_size samples."""
        source = SoundDeviceSource(frame_size=6)
        source._audio_callback(np.arange(4, dtype=np.float32).reshape(-1, 1), 4, None, None)
        source._audio_callback(np.arange(4, 8, dtype=np.float32).reshape(-1, 1), 4, None, None)

        buffer = np.zeros(6)
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [2, 3, 4, 5, 6, 7])

    def test_block_larger_than_frame(self):
        source = SoundDeviceSource(frame_size=4)
        source._audio_callback(np.arange(10, dtype=np.float32).reshape(-1, 1), 10, None, None)

        buffer = np.zeros(4)
        source.fill(buffer)
        np.testing.assert_array_equal(buffer, [6, 7, 8, 9])

    def test_start_and_stop(self, fake_sounddevice):
        source = SoundDeviceSource(sample_rate=48000)
        stream = source.start()

        assert stream.started
        assert source.is_active
        assert source.sample_rate == 48000.0

        source.stop()
        assert stream.closed
        assert not source.is_active

    def test_stop_is_idempotent(self, fake_sounddevice):
        source = SoundDeviceSource()
        source.stop()
        source.start()
        source.stop()
        source.stop()
        assert len(FakeStream.instances) == 1

    def test_start_failure_raises_and_closes_stream(self, fake_sounddevice):
        """A PortAudio error becomes AudioSourceError and nothing stays open."""
        fake_sounddevice.InputStream = FailingStartStream
        source = SoundDeviceSource()

        with pytest.raises(AudioSourceError):
            source.start()

        assert not source.is_active
        assert FakeStream.instances[0].closed

    def test_list_input_devices(self, fake_sounddevice):
        from pitch_control.audio_source import list_input_devices

        assert list_input_devices() == [(1, "USB Mic")]
