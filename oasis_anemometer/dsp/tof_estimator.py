################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Time-of-flight estimation from one 16-sample complex burst.

The arrival time is the half-maximum crossing of the matched-filter
magnitude, refined by linear interpolation between the two samples that
bracket it. Magnitudes stay squared integers until the final interpolation,
the way the sensor firmware does it.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from oasis_anemometer.anemometer_types import SAMPLES_PER_BURST
from oasis_anemometer.anemometer_types import HalfMaxCrossing
from oasis_anemometer.anemometer_types import TofEstimate
from oasis_anemometer.config.anemometer_params import EstimatorParams


# Nanoseconds per microsecond for the calibration pulse width
_NS_PER_US: float = 1000.0


class DegenerateBurstError(Exception):
    """Raised when a burst cannot produce a valid time of flight.

    Attributes:
        reason: Short machine-readable reason
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason: str = reason


def magnitude_squared(
    in_phase: Sequence[int] | np.ndarray, quadrature: Sequence[int] | np.ndarray
) -> np.ndarray:
    """Return I^2 + Q^2 per sample using 64-bit accumulation."""
    i_samples: np.ndarray = _as_burst(in_phase, "in_phase")
    q_samples: np.ndarray = _as_burst(quadrature, "quadrature")
    return i_samples * i_samples + q_samples * q_samples


def half_max_crossing(mag2: np.ndarray) -> HalfMaxCrossing:
    """Locate the half-maximum crossing of a squared-magnitude sequence.

    The threshold is a quarter of the maximum squared magnitude, which is
    half the maximum linear magnitude.
    """
    mag2 = np.asarray(mag2, dtype=np.int64)
    mag_max: int = int(np.max(mag2))
    if mag_max <= 0:
        raise DegenerateBurstError("no_signal", "Burst has no signal energy")

    quarter: int = mag_max // 4

    less_index: int = 0
    greater_index: int | None = None
    for index, value in enumerate(mag2.tolist()):
        if value < quarter:
            less_index = index
        if value > quarter:
            greater_index = index
            break

    if greater_index is None:
        raise DegenerateBurstError(
            "no_crossing", "No sample exceeds the half-maximum threshold"
        )

    less_val: float = math.sqrt(float(mag2[less_index]))
    greater_val: float = math.sqrt(float(mag2[greater_index]))
    half_val: float = math.sqrt(float(quarter))

    if greater_val == less_val:
        raise DegenerateBurstError(
            "flat_crossing",
            f"Interpolation samples {less_index} and {greater_index} are equal",
        )

    lerp_index: float = less_index + (half_val - less_val) / (greater_val - less_val)

    return HalfMaxCrossing(
        less_index=less_index,
        greater_index=greater_index,
        quarter=quarter,
        lerp_index=lerp_index,
    )


def effective_frequency(
    sample_freq_factor: int,
    cal_resolution: int,
    cal_pulse_width_ns: int,
    params: EstimatorParams,
) -> float:
    """Return the effective sampling frequency of the burst."""
    if cal_pulse_width_ns <= 0:
        raise DegenerateBurstError(
            "bad_frequency", "Calibration pulse width must be positive"
        )
    freq: float = (
        float(sample_freq_factor)
        / params.freq_factor_divisor
        * float(cal_resolution)
        / (float(cal_pulse_width_ns) / _NS_PER_US)
    )
    if not math.isfinite(freq) or freq <= 0.0:
        raise DegenerateBurstError(
            "bad_frequency", f"Effective sample frequency {freq} is not positive"
        )
    return freq


def estimate_tof(
    in_phase: Sequence[int] | np.ndarray,
    quadrature: Sequence[int] | np.ndarray,
    *,
    sample_freq_factor: int,
    cal_resolution: int,
    cal_pulse_width_ns: int,
    params: EstimatorParams,
) -> TofEstimate:
    """Estimate the time of flight in seconds for one burst.

    Raises:
        DegenerateBurstError: When the burst cannot yield a positive, finite
            time of flight
    """
    mag2: np.ndarray = magnitude_squared(in_phase, quadrature)
    crossing: HalfMaxCrossing = half_max_crossing(mag2)
    freq: float = effective_frequency(
        sample_freq_factor, cal_resolution, cal_pulse_width_ns, params
    )

    tof_s: float = (crossing.lerp_index + params.count_offset) / freq * params.tof_scale
    if not math.isfinite(tof_s) or tof_s <= 0.0:
        raise DegenerateBurstError(
            "non_positive_tof",
            f"Crossing index {crossing.lerp_index:.3f} with offset "
            f"{params.count_offset} gives non-positive ToF",
        )

    return TofEstimate(
        tof_s=tof_s,
        lerp_index=crossing.lerp_index,
        freq=freq,
        less_index=crossing.less_index,
        greater_index=crossing.greater_index,
        magnitudes=np.sqrt(mag2.astype(np.float64)),
    )


def _as_burst(values: Sequence[int] | np.ndarray, name: str) -> np.ndarray:
    """Coerce burst samples to an int64 array of the burst length."""
    array: np.ndarray = np.asarray(values)
    if array.shape != (SAMPLES_PER_BURST,):
        raise ValueError(f"{name} must have shape ({SAMPLES_PER_BURST},)")
    if not np.issubdtype(array.dtype, np.integer):
        raise ValueError(f"{name} must contain integers")
    if np.any(array < np.iinfo(np.int16).min) or np.any(
        array > np.iinfo(np.int16).max
    ):
        raise ValueError(f"{name} must fit in int16")
    return array.astype(np.int64)
