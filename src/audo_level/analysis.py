"""BS.1770 integrated loudness and sample-peak measurement."""

from __future__ import annotations

import math

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .domain.models import AudioBuffer, LoudnessMeasurement
from .domain.policies import DEFAULT_GATING_POLICY, GatingPolicy
from .filters import k_weight

_LOUDNESS_OFFSET = -0.691


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def power_to_lufs(power: float) -> float:
    return _LOUDNESS_OFFSET + 10.0 * math.log10(power)


def lufs_to_power(lufs: float) -> float:
    return 10.0 ** ((lufs - _LOUDNESS_OFFSET) / 10.0)


def channel_weights(channel_count: int, policy: GatingPolicy = DEFAULT_GATING_POLICY) -> np.ndarray:
    """Per-channel loudness weights; surround channels get about +1.5 dB."""

    return np.array(
        [1.0 if idx < policy.front_channel_count else policy.surround_weight for idx in range(channel_count)],
        dtype=np.float64,
    )


def block_lengths(sample_rate_hz: int, policy: GatingPolicy = DEFAULT_GATING_POLICY) -> tuple[int, int]:
    """Return ``(block_samples, step_samples)`` for the gating window."""

    block_samples = _round_half_up(policy.block_seconds * sample_rate_hz)
    step_samples = max(1, _round_half_up(block_samples * (1.0 - policy.overlap)))
    return block_samples, step_samples


def block_powers(
    weighted_channels: tuple[np.ndarray, ...] | list[np.ndarray],
    sample_rate_hz: int,
    policy: GatingPolicy = DEFAULT_GATING_POLICY,
) -> np.ndarray:
    """Weighted mean-square power of every full overlapping block.

    Returns an empty array when the signal is shorter than one block.
    """

    if not weighted_channels:
        return np.array([], dtype=np.float64)

    block_samples, step_samples = block_lengths(sample_rate_hz, policy)
    frames = weighted_channels[0].shape[0]
    if block_samples <= 0 or frames < block_samples:
        return np.array([], dtype=np.float64)

    weights = channel_weights(len(weighted_channels), policy)
    powers: np.ndarray | None = None
    for weight, channel in zip(weights, weighted_channels):
        squared = np.square(np.asarray(channel, dtype=np.float64))
        windows = sliding_window_view(squared, block_samples)[::step_samples]
        channel_power = weight * np.mean(windows, axis=-1, dtype=np.float64)
        powers = channel_power if powers is None else powers + channel_power
    return powers


def _gate(powers: np.ndarray, policy: GatingPolicy) -> tuple[float, bool]:
    """Two-stage gate returning ``(loudness, relative_gate_passed)``.

    When the relative gate discards every block ``loudness`` is the ungated
    value and the flag is false.
    """

    absolute_threshold = lufs_to_power(policy.absolute_gate_lufs)
    ungated = powers[powers > absolute_threshold]
    if ungated.size == 0:
        return -math.inf, False

    ungated_lufs = power_to_lufs(float(np.mean(ungated)))

    relative_threshold = lufs_to_power(ungated_lufs + policy.relative_gate_lu)
    gated = ungated[ungated > relative_threshold]
    if gated.size == 0:
        return ungated_lufs, False

    return power_to_lufs(float(np.mean(gated))), True


def gated_loudness(powers: np.ndarray, policy: GatingPolicy = DEFAULT_GATING_POLICY) -> float:
    """Integrated loudness in LUFS of a block-power sequence.

    The absolute gate runs first; the relative threshold is derived from the
    absolute-gate survivors. Swapping the order changes the result.
    """

    loudness, _ = _gate(np.asarray(powers, dtype=np.float64), policy)
    return loudness


def sample_peak(buffer: AudioBuffer) -> float:
    """Maximum absolute sample of the unweighted buffer (no oversampling)."""

    if buffer.frame_count == 0:
        return 0.0
    return float(max(np.max(np.abs(channel)) for channel in buffer.channels))


def measure_buffer(buffer: AudioBuffer, policy: GatingPolicy = DEFAULT_GATING_POLICY) -> LoudnessMeasurement:
    """Measure integrated loudness and sample peak of ``buffer``."""

    weighted = tuple(k_weight(channel, buffer.sample_rate_hz) for channel in buffer.channels)
    powers = block_powers(weighted, buffer.sample_rate_hz, policy)
    loudness, relative_gate_passed = _gate(powers, policy)

    if loudness == -math.inf:
        return LoudnessMeasurement(lufs=-math.inf, peak=sample_peak(buffer))
    if not relative_gate_passed:
        return LoudnessMeasurement(lufs=loudness, peak=0.0)
    return LoudnessMeasurement(lufs=loudness, peak=sample_peak(buffer))


def measure_integrated_lufs(audio: np.ndarray, sample_rate_hz: int) -> float:
    """Integrated LUFS of a mono or channel-first array."""

    return measure_buffer(AudioBuffer.from_array(audio, sample_rate_hz)).lufs
