from .config import (
    GainSettings,
    NormalizerConfig,
    NormalizerSettings,
    load_settings,
    load_settings_from_env,
)

__all__ = [
    "GainSettings",
    "NormalizerConfig",
    "NormalizerSettings",
    "load_settings",
    "load_settings_from_env",
]
