import math

import numpy as np
import pyloudnorm as pyln
import pytest

from conftest import make_sine

from audo_level.analysis import (
    block_lengths,
    block_powers,
    channel_weights,
    gated_loudness,
    lufs_to_power,
    measure_buffer,
    measure_integrated_lufs,
    power_to_lufs,
    sample_peak,
)
from audo_level.domain.models import AudioBuffer


def test_full_scale_1khz_sine_reads_minus_3_lufs(sine_wave) -> None:
    buffer = AudioBuffer.from_array(sine_wave["full_scale"], sine_wave["sample_rate"])

    measurement = measure_buffer(buffer)

    assert measurement.lufs == pytest.approx(-3.01, abs=0.1)
    assert measurement.peak == pytest.approx(1.0, abs=1e-6)


def test_loudness_is_monotonic_in_amplitude(sine_wave) -> None:
    quiet = measure_integrated_lufs(sine_wave["quiet"], sine_wave["sample_rate"])
    loud = measure_integrated_lufs(sine_wave["loud"], sine_wave["sample_rate"])

    assert loud > quiet
    assert loud - quiet == pytest.approx(20 * math.log10(5.0), abs=0.01)


def test_matches_pyloudnorm_on_stereo_noise() -> None:
    sample_rate = 48_000
    rng = np.random.default_rng(1770)
    noise = 0.1 * rng.standard_normal((2, sample_rate * 5))

    ours = measure_integrated_lufs(noise, sample_rate)
    reference = pyln.Meter(sample_rate).integrated_loudness(noise.T)

    assert ours == pytest.approx(reference, abs=0.1)


def test_digital_silence_is_negative_infinity_with_zero_peak() -> None:
    buffer = AudioBuffer.from_array(np.zeros((2, 48_000)), 48_000)

    measurement = measure_buffer(buffer)

    assert measurement.lufs == -math.inf
    assert measurement.is_silent
    assert measurement.peak == 0.0


def test_content_below_absolute_gate_reports_actual_peak() -> None:
    tone = make_sine(1_000.0, 1e-5, 2.0, 48_000)

    measurement = measure_buffer(AudioBuffer.from_array(tone, 48_000))

    assert measurement.lufs == -math.inf
    assert measurement.peak == pytest.approx(float(np.max(np.abs(tone))))


def test_signal_shorter_than_one_block_is_silent(sine_wave) -> None:
    short = sine_wave["loud"][: int(0.3 * sine_wave["sample_rate"])]

    measurement = measure_buffer(AudioBuffer.from_array(short, sine_wave["sample_rate"]))

    assert measurement.lufs == -math.inf


def test_block_lengths_use_400ms_with_75_percent_overlap() -> None:
    assert block_lengths(48_000) == (19_200, 4_800)
    assert block_lengths(44_100) == (17_640, 4_410)


def test_block_powers_count_only_full_blocks() -> None:
    channel = np.ones(48_000)

    powers = block_powers((channel,), 48_000)

    assert powers.shape == (7,)
    assert np.allclose(powers, 1.0)


def test_block_powers_empty_for_short_signal() -> None:
    assert block_powers((np.ones(100),), 48_000).size == 0
    assert block_powers((), 48_000).size == 0


def test_block_powers_weight_channels_and_sum() -> None:
    channels = tuple(np.full(19_200, 0.5) for _ in range(5))

    powers = block_powers(channels, 48_000)

    assert powers == pytest.approx([3 * 0.25 + 2 * 1.41 * 0.25])


def test_channel_weights_boost_surrounds() -> None:
    assert channel_weights(6).tolist() == [1.0, 1.0, 1.0, 1.41, 1.41, 1.41]
    assert channel_weights(2).tolist() == [1.0, 1.0]


def test_surround_channel_reads_about_1_5_db_louder(sine_wave) -> None:
    tone = sine_wave["loud"]
    front = np.zeros((5, tone.size))
    surround = np.zeros((5, tone.size))
    front[0] = tone
    surround[3] = tone

    front_lufs = measure_integrated_lufs(front, sine_wave["sample_rate"])
    surround_lufs = measure_integrated_lufs(surround, sine_wave["sample_rate"])

    assert surround_lufs - front_lufs == pytest.approx(10 * math.log10(1.41), abs=1e-6)


def test_lufs_power_conversion_round_trip() -> None:
    assert power_to_lufs(lufs_to_power(-23.0)) == pytest.approx(-23.0)
    assert power_to_lufs(1.0) == pytest.approx(-0.691)


def test_absolute_gate_discards_everything_below_minus_70() -> None:
    powers = np.full(10, lufs_to_power(-75.0))

    assert gated_loudness(powers) == -math.inf
    assert gated_loudness(np.array([])) == -math.inf


def test_block_exactly_at_absolute_gate_is_discarded() -> None:
    powers = np.full(4, lufs_to_power(-70.0))

    assert gated_loudness(powers) == -math.inf


def test_relative_gate_drops_quiet_passages() -> None:
    powers = np.concatenate([np.full(10, lufs_to_power(-20.0)), np.full(10, lufs_to_power(-45.0))])

    assert gated_loudness(powers) == pytest.approx(-20.0)


def test_blocks_must_pass_both_gates() -> None:
    # -72 LUFS blocks sit above the relative threshold (-75) but below the absolute gate.
    powers = np.concatenate([np.full(4, lufs_to_power(-65.0)), np.full(4, lufs_to_power(-72.0))])

    assert gated_loudness(powers) == pytest.approx(-65.0)


def test_sample_peak_uses_unweighted_signal() -> None:
    left = np.zeros(1_000)
    right = np.zeros(1_000)
    right[500] = -0.8
    buffer = AudioBuffer.from_array(np.vstack([left, right]), 48_000)

    assert sample_peak(buffer) == pytest.approx(0.8)


def test_measure_buffer_keeps_caller_buffer_unchanged(sine_wave) -> None:
    buffer = AudioBuffer.from_array(sine_wave["loud"], sine_wave["sample_rate"])
    before = buffer.channels[0].copy()

    measure_buffer(buffer)

    assert np.array_equal(buffer.channels[0], before)


def test_audio_buffer_rejects_invalid_input() -> None:
    with pytest.raises(ValueError):
        AudioBuffer.from_array(np.zeros((2, 10)), 0)
    with pytest.raises(ValueError):
        AudioBuffer(sample_rate_hz=48_000, channels=(np.zeros(10), np.zeros(11)))
    with pytest.raises(ValueError):
        AudioBuffer(sample_rate_hz=48_000, channels=())
    with pytest.raises(ValueError):
        AudioBuffer.from_array(np.zeros((1, 2, 3)), 48_000)
