"""Domain services that contain pure gain rules."""

from __future__ import annotations

import math

from audo_level.domain.models import LoudnessMeasurement
from audo_level.domain.policies import DEFAULT_GAIN_POLICY, GainPolicy

UNITY_GAIN = 1.0


def compute_gain_db(
    measurement: LoudnessMeasurement | None,
    target_lufs: float,
    policy: GainPolicy = DEFAULT_GAIN_POLICY,
) -> float:
    """Return the gain in dB that moves ``measurement`` toward ``target_lufs``.

    The boost is capped so the measured sample peak lands at or below the peak
    ceiling. Unknown, silent, or implausibly quiet content gets 0 dB.
    """

    if measurement is None or measurement.is_silent:
        return 0.0

    gain_db = target_lufs - measurement.lufs
    peak_db = 20.0 * math.log10(max(measurement.peak, policy.peak_floor))
    max_gain_db = policy.peak_ceiling_db - peak_db
    if gain_db > max_gain_db:
        gain_db = max_gain_db
    if gain_db > policy.max_boost_db:
        return 0.0
    return gain_db


def compute_gain(
    measurement: LoudnessMeasurement | None,
    target_lufs: float,
    policy: GainPolicy = DEFAULT_GAIN_POLICY,
) -> float:
    """Linear gain for a lane playing ``measurement`` at ``target_lufs``."""

    gain_db = compute_gain_db(measurement, target_lufs, policy)
    if gain_db == 0.0:
        return UNITY_GAIN
    return 10.0 ** (gain_db / 20.0)


def gain_to_db(gain: float) -> float:
    if gain <= 0.0:
        return -math.inf
    return 20.0 * math.log10(gain)
