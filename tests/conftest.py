import io
import threading
import wave

import numpy as np
import pytest

from audo_level.domain.models import AudioBuffer, LaneId


def make_sine(frequency_hz: float, amplitude: float, duration_s: float, sample_rate: int) -> np.ndarray:
    t = np.arange(int(round(duration_s * sample_rate)), dtype=np.float64) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency_hz * t)


def make_wav_bytes(audio: np.ndarray, sample_rate: int = 48_000) -> bytes:
    """Encode mono or channel-first float audio as 16-bit PCM WAV."""

    channel_first = np.atleast_2d(audio)
    interleaved = np.clip(channel_first.T, -1.0, 1.0)
    pcm = np.round(interleaved * 32767.0).astype("<i2")
    with io.BytesIO() as buffer:
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(channel_first.shape[0])
            wav.setsampwidth(2)
            wav.setframerate(sample_rate)
            wav.writeframes(pcm.tobytes())
        return buffer.getvalue()


@pytest.fixture
def sine_wave():
    sample_rate = 48_000
    base = make_sine(1_000.0, 1.0, 3.0, sample_rate)
    return {
        "sample_rate": sample_rate,
        "quiet": 0.1 * base,
        "loud": 0.5 * base,
        "full_scale": base,
    }


class CountingFetcher:
    """Fetcher double returning fixed bytes and counting calls."""

    def __init__(self, payload: bytes = b"encoded-audio", gate: threading.Event | None = None) -> None:
        self.payload = payload
        self.gate = gate
        self.calls: list[str] = []
        self.failures: list[Exception] = []
        self.on_fetch = None

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        if self.on_fetch is not None:
            self.on_fetch(url)
        if self.failures:
            raise self.failures.pop(0)
        return self.payload


class StaticDecoder:
    """Decoder double returning a fixed buffer."""

    def __init__(self, buffer: AudioBuffer) -> None:
        self.buffer = buffer
        self.calls = 0

    def decode(self, raw_bytes: bytes) -> AudioBuffer:
        self.calls += 1
        return self.buffer


class RecordingGain:
    def __init__(self) -> None:
        self.ramps: list[tuple[float, float]] = []

    def ramp_to(self, value: float, time_constant: float) -> None:
        self.ramps.append((value, time_constant))

    @property
    def target(self) -> float | None:
        return self.ramps[-1][0] if self.ramps else None


class RecordingLane:
    def __init__(self) -> None:
        self.assigned_content_id: str | None = None
        self.gain: RecordingGain | None = None
        self.connect_calls = 0
        self.disconnect_calls = 0

    def connect_gain(self) -> RecordingGain:
        self.connect_calls += 1
        self.gain = RecordingGain()
        return self.gain

    def disconnect(self) -> None:
        self.disconnect_calls += 1


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def loud_buffer(sine_wave) -> AudioBuffer:
    stereo = np.vstack([sine_wave["loud"], sine_wave["loud"]])
    return AudioBuffer.from_array(stereo, sine_wave["sample_rate"])


@pytest.fixture
def lanes() -> dict[LaneId, RecordingLane]:
    return {LaneId.A: RecordingLane(), LaneId.B: RecordingLane()}
