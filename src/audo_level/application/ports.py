"""Capabilities the host application provides to the normalizer."""

from __future__ import annotations

from typing import Protocol

from audo_level.domain.models import AudioBuffer


class AudioFetcher(Protocol):
    """Port returning raw encoded audio bytes for a URL."""

    def fetch(self, url: str) -> bytes:
        """Return the bytes at ``url`` or raise :class:`AudioFetchError`."""


class AudioDecoder(Protocol):
    """Port decoding raw bytes into PCM."""

    def decode(self, raw_bytes: bytes) -> AudioBuffer:
        """Return decoded audio or raise :class:`AudioDecodeError`."""


class GainControl(Protocol):
    """Gain stage of one output lane."""

    def ramp_to(self, value: float, time_constant: float) -> None:
        """Approach ``value`` exponentially with the given time constant (seconds)."""


class PlaybackLane(Protocol):
    """One of the two host output paths."""

    @property
    def assigned_content_id(self) -> str | None:
        """Content id the host is currently playing on this lane."""

    def connect_gain(self) -> GainControl:
        """Insert a gain stage into the lane's output path."""

    def disconnect(self) -> None:
        """Release the gain stage and any audio-processing resources."""
