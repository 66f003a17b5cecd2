"""Domain value objects holding the tunable loudness constants."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GatingPolicy:
    """BS.1770 block and gate parameters."""

    block_seconds: float = 0.4
    overlap: float = 0.75
    absolute_gate_lufs: float = -70.0
    relative_gate_lu: float = -10.0
    front_channel_count: int = 3
    surround_weight: float = 1.41


@dataclass(frozen=True, slots=True)
class GainPolicy:
    """Limits and ramp timing used when driving a lane toward the target."""

    peak_ceiling_db: float = -0.5
    max_boost_db: float = 24.0
    ramp_seconds: float = 0.4
    ramp_time_constant_fraction: float = 1.0 / 3.0
    analysis_unity_time_constant: float = 0.05
    peak_floor: float = 1e-10

    @property
    def ramp_time_constant(self) -> float:
        return self.ramp_seconds * self.ramp_time_constant_fraction


DEFAULT_TARGET_LUFS = -14.0
DEFAULT_GATING_POLICY = GatingPolicy()
DEFAULT_GAIN_POLICY = GainPolicy()
