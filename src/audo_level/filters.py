"""K-weighting filter bank (ITU-R BS.1770).

K-weighting is two biquad sections applied in series:

* a high-frequency shelf (about +4 dB above 1.5 kHz) modelling the acoustic
  effect of the head;
* a high-pass rolloff below roughly 50 Hz.

Coefficients are pre-computed for 48 kHz and 44.1 kHz. Any other sample rate
uses the 48 kHz set; this is an approximation and the coefficients are not
re-derived per rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.signal import lfilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BiquadCoefficients:
    """Two-pole/two-zero section, ``a[0]`` normalized to 1."""

    b: tuple[float, float, float]
    a: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class KWeightingCoefficients:
    shelf: BiquadCoefficients
    highpass: BiquadCoefficients


FALLBACK_SAMPLE_RATE_HZ = 48_000

K_WEIGHTING_COEFFICIENTS: dict[int, KWeightingCoefficients] = {
    48_000: KWeightingCoefficients(
        shelf=BiquadCoefficients(
            b=(1.53512485958697, -2.69169618940638, 1.19839281085285),
            a=(1.0, -1.69065929318241, 0.73248077421585),
        ),
        highpass=BiquadCoefficients(
            b=(1.0, -2.0, 1.0),
            a=(1.0, -1.99004745483398, 0.99007225036621),
        ),
    ),
    44_100: KWeightingCoefficients(
        shelf=BiquadCoefficients(
            b=(1.53090959966428, -2.65116903469122, 1.16903097776360),
            a=(1.0, -1.66363794709474, 0.71238064688380),
        ),
        highpass=BiquadCoefficients(
            b=(1.0, -2.0, 1.0),
            a=(1.0, -1.98916967210520, 0.98919159781614),
        ),
    ),
}

_warned_rates: set[int] = set()


def coefficients_for_rate(sample_rate_hz: int) -> KWeightingCoefficients:
    """Return native coefficients for ``sample_rate_hz`` or the 48 kHz set."""

    coefficients = K_WEIGHTING_COEFFICIENTS.get(int(sample_rate_hz))
    if coefficients is not None:
        return coefficients

    if sample_rate_hz not in _warned_rates:
        _warned_rates.add(sample_rate_hz)
        logger.debug(
            "No native K-weighting coefficients for %s Hz; using %s Hz set.",
            sample_rate_hz,
            FALLBACK_SAMPLE_RATE_HZ,
        )
    return K_WEIGHTING_COEFFICIENTS[FALLBACK_SAMPLE_RATE_HZ]


def apply_biquad(samples: np.ndarray, coefficients: BiquadCoefficients) -> np.ndarray:
    """Run one biquad section from zero state and return a new array.

    ``lfilter`` evaluates the Direct-Form-II-transposed recurrence::

        y[i] = b0*x[i] + z1
        z1   = b1*x[i] - a1*y[i] + z2
        z2   = b2*x[i] - a2*y[i]
    """

    data = np.asarray(samples, dtype=np.float64)
    if data.size == 0:
        return data.copy()
    return lfilter(coefficients.b, coefficients.a, data)


def k_weight(samples: np.ndarray, sample_rate_hz: int) -> np.ndarray:
    """Apply the shelf then the high-pass stage to a private copy of ``samples``."""

    coefficients = coefficients_for_rate(sample_rate_hz)
    weighted = np.array(samples, dtype=np.float64, copy=True)
    weighted = apply_biquad(weighted, coefficients.shelf)
    return apply_biquad(weighted, coefficients.highpass)
