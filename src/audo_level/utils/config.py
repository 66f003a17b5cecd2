from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from audo_level.domain.policies import DEFAULT_GAIN_POLICY, DEFAULT_TARGET_LUFS, GainPolicy


class NormalizerConfig(BaseModel):
    enabled: bool = False
    target_lufs: float = Field(DEFAULT_TARGET_LUFS)

    @field_validator("target_lufs")
    @classmethod
    def _validate_target_lufs(cls, value: float) -> float:
        if value > 0.0:
            raise ValueError("target_lufs must be <= 0.0.")
        return value


class GainSettings(BaseModel):
    peak_ceiling_db: float = Field(DEFAULT_GAIN_POLICY.peak_ceiling_db, le=0.0)
    max_boost_db: float = Field(DEFAULT_GAIN_POLICY.max_boost_db, ge=0.0, le=60.0)
    ramp_seconds: float = Field(DEFAULT_GAIN_POLICY.ramp_seconds, gt=0.0, le=10.0)

    def to_gain_policy(self) -> GainPolicy:
        return GainPolicy(
            peak_ceiling_db=self.peak_ceiling_db,
            max_boost_db=self.max_boost_db,
            ramp_seconds=self.ramp_seconds,
        )


class NormalizerSettings(BaseModel):
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    gain: GainSettings = Field(default_factory=GainSettings)
    fetch_timeout_seconds: float = Field(30.0, gt=0.0)


def load_settings(path: Path) -> NormalizerSettings:
    data = _load_config_data(path)
    return NormalizerSettings.model_validate(data)


@lru_cache(maxsize=1)
def load_settings_from_env() -> NormalizerSettings:
    """Load settings from ``AUDO_LEVEL_*`` environment variables."""

    normalizer: dict[str, object] = {}
    gain: dict[str, object] = {}
    data: dict[str, object] = {"normalizer": normalizer, "gain": gain}

    enabled = os.getenv("AUDO_LEVEL_ENABLED")
    if enabled is not None:
        normalizer["enabled"] = enabled.lower() in {"1", "true", "yes", "on"}
    target = os.getenv("AUDO_LEVEL_TARGET_LUFS")
    if target is not None:
        normalizer["target_lufs"] = float(target)
    ceiling = os.getenv("AUDO_LEVEL_PEAK_CEILING_DB")
    if ceiling is not None:
        gain["peak_ceiling_db"] = float(ceiling)
    timeout = os.getenv("AUDO_LEVEL_FETCH_TIMEOUT_SECONDS")
    if timeout is not None:
        data["fetch_timeout_seconds"] = float(timeout)

    return NormalizerSettings.model_validate(data)


def _load_config_data(path: Path) -> dict:
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ImportError("PyYAML is required to load YAML configs.") from exc

        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
