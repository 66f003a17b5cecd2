"""Error taxonomy for loudness measurement."""

from __future__ import annotations


class AudioLevelError(Exception):
    """Base error carrying a machine-readable code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class MeasurementError(AudioLevelError):
    """A measurement attempt failed; the content id may be retried later."""


class AudioFetchError(MeasurementError):
    """Raw audio bytes could not be retrieved."""


class AudioDecodeError(MeasurementError):
    """Raw bytes could not be decoded into PCM."""
