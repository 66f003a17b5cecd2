"""Domain models for loudness measurement and lane playback."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

_PEAK_FLOOR = 1e-10


class LaneId(str, Enum):
    """The two playback lanes used for gapless/crossfade transitions."""

    A = "A"
    B = "B"


class LaneState(str, Enum):
    """Normalization lifecycle for the content currently started on a lane."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    APPLIED = "applied"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class AudioBuffer:
    """Decoded multichannel PCM held only for the duration of a measurement."""

    sample_rate_hz: int
    channels: tuple[np.ndarray, ...]

    def __post_init__(self) -> None:
        if self.sample_rate_hz <= 0:
            raise ValueError("Sample rate must be a positive integer.")
        if not self.channels:
            raise ValueError("Audio buffer must contain at least one channel.")
        lengths = {channel.shape[0] for channel in self.channels}
        if len(lengths) != 1:
            raise ValueError("All channels must have the same number of frames.")

    @classmethod
    def from_array(cls, audio: np.ndarray, sample_rate_hz: int) -> "AudioBuffer":
        """Build a buffer from a mono 1D array or a channel-first 2D array."""

        array = np.asarray(audio, dtype=np.float64)
        if array.ndim == 1:
            array = array[np.newaxis, :]
        if array.ndim != 2:
            raise ValueError("Audio must be a 1D mono or 2D channel-first array.")
        return cls(
            sample_rate_hz=int(sample_rate_hz),
            channels=tuple(np.array(row, dtype=np.float64) for row in array),
        )

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return int(self.channels[0].shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate_hz


@dataclass(frozen=True, slots=True)
class LoudnessMeasurement:
    """Integrated loudness and sample peak of one piece of content.

    ``lufs`` is ``-inf`` when no block passed the absolute gate.
    """

    lufs: float
    peak: float

    @property
    def is_silent(self) -> bool:
        return self.lufs == -math.inf

    @property
    def peak_db(self) -> float:
        return 20.0 * math.log10(max(self.peak, _PEAK_FLOOR))
