"""In-process playback lane with a numpy gain stage.

``SoftwareGain`` follows the same envelope as Web Audio's
``setTargetAtTime``: after a ramp starts at ``t0`` from value ``g0``::

    g(t) = target + (g0 - target) * exp(-(t - t0) / tau)

so a 0.4 s ramp with ``tau = 0.4 / 3`` is ~95% settled at 0.4 s.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import numpy as np


class SoftwareGain:
    """Exponentially ramped gain applied to numpy audio blocks."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, initial_value: float = 1.0) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._start_value = float(initial_value)
        self._target = float(initial_value)
        self._start_time = clock()
        self._time_constant = 0.0

    @property
    def target(self) -> float:
        return self._target

    def ramp_to(self, value: float, time_constant: float) -> None:
        now = self._clock()
        with self._lock:
            self._start_value = self._value_at(now)
            self._target = float(value)
            self._start_time = now
            self._time_constant = max(float(time_constant), 0.0)

    def value_at(self, when: float | None = None) -> float:
        with self._lock:
            return self._value_at(self._clock() if when is None else when)

    def process(self, block: np.ndarray, sample_rate_hz: int) -> np.ndarray:
        """Apply the envelope to a mono or channel-first block starting now."""

        audio = np.asarray(block)
        frames = audio.shape[-1]
        offsets = np.arange(frames, dtype=np.float64) / float(sample_rate_hz)
        start = self._clock()
        with self._lock:
            envelope = self._envelope(start + offsets)
        return (audio * envelope).astype(audio.dtype, copy=False)

    def _value_at(self, when: float) -> float:
        return float(self._envelope(np.array([when], dtype=np.float64))[0])

    def _envelope(self, times: np.ndarray) -> np.ndarray:
        if self._time_constant == 0.0:
            return np.full(times.shape, self._target, dtype=np.float64)
        elapsed = np.maximum(times - self._start_time, 0.0)
        decay = np.exp(-elapsed / self._time_constant)
        return self._target + (self._start_value - self._target) * decay


class SoftwareLane:
    """Playback lane whose gain stage lives in-process."""

    def __init__(self, name: str = "", clock: Callable[[], float] = time.monotonic) -> None:
        self.name = name
        self._clock = clock
        self._assigned_content_id: str | None = None
        self._gain: SoftwareGain | None = None

    @property
    def assigned_content_id(self) -> str | None:
        return self._assigned_content_id

    def assign(self, content_id: str | None) -> None:
        """Record which content the lane is playing."""

        self._assigned_content_id = content_id

    @property
    def gain(self) -> SoftwareGain | None:
        return self._gain

    def connect_gain(self) -> SoftwareGain:
        if self._gain is None:
            self._gain = SoftwareGain(clock=self._clock)
        return self._gain

    def disconnect(self) -> None:
        self._gain = None

    def process(self, block: np.ndarray, sample_rate_hz: int) -> np.ndarray:
        if self._gain is None:
            return block
        return self._gain.process(block, sample_rate_hz)

