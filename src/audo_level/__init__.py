"""Public package exports for Audo_Level with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "AudioBuffer",
    "LaneId",
    "LoudnessMeasurement",
    "LoudnessNormalizer",
    "MeasurementCache",
    "MeasurementError",
    "NormalizerConfig",
    "compute_gain",
    "k_weight",
    "measure_buffer",
]

_EXPORT_MODULES: dict[str, str] = {
    "AudioBuffer": "audo_level.domain.models",
    "LaneId": "audo_level.domain.models",
    "LoudnessMeasurement": "audo_level.domain.models",
    "LoudnessNormalizer": "audo_level.application.normalizer",
    "MeasurementCache": "audo_level.application.measurement_cache",
    "MeasurementError": "audo_level.domain.errors",
    "NormalizerConfig": "audo_level.utils.config",
    "compute_gain": "audo_level.domain.services",
    "k_weight": "audo_level.filters",
    "measure_buffer": "audo_level.analysis",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'audo_level' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
