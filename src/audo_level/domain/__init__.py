"""DDD domain layer."""

from .errors import AudioDecodeError, AudioFetchError, AudioLevelError, MeasurementError
from .events import CacheCleared, DomainEvent, GainApplied, MeasurementCompleted, MeasurementFailed, MeasurementStarted
from .models import AudioBuffer, LaneId, LaneState, LoudnessMeasurement
from .policies import (
    DEFAULT_GAIN_POLICY,
    DEFAULT_GATING_POLICY,
    DEFAULT_TARGET_LUFS,
    GainPolicy,
    GatingPolicy,
)
from .services import UNITY_GAIN, compute_gain, compute_gain_db, gain_to_db

__all__ = [
    "AudioLevelError",
    "MeasurementError",
    "AudioFetchError",
    "AudioDecodeError",
    "DomainEvent",
    "MeasurementStarted",
    "MeasurementCompleted",
    "MeasurementFailed",
    "GainApplied",
    "CacheCleared",
    "AudioBuffer",
    "LaneId",
    "LaneState",
    "LoudnessMeasurement",
    "GainPolicy",
    "GatingPolicy",
    "DEFAULT_GAIN_POLICY",
    "DEFAULT_GATING_POLICY",
    "DEFAULT_TARGET_LUFS",
    "UNITY_GAIN",
    "compute_gain",
    "compute_gain_db",
    "gain_to_db",
]
