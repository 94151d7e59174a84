################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Result types for time-of-flight estimation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


# Coarse sample period used for the per-sample delay estimate, microseconds
COARSE_SAMPLE_PERIOD_US: float = 50.0


@dataclass(frozen=True)
class HalfMaxCrossing:
    """Half-maximum crossing located in a squared-magnitude sequence.

    Attributes:
        less_index: Last index below the threshold before the crossing
        greater_index: First index above the threshold
        quarter: Squared-magnitude threshold, a quarter of the maximum
        lerp_index: Fractional sample index of the crossing
    """

    less_index: int
    greater_index: int
    quarter: int
    lerp_index: float


@dataclass(frozen=True)
class TofEstimate:
    """Time-of-flight estimate for one burst with diagnostics.

    Only ``tof_s`` is part of the correctness contract; the remaining fields
    exist for observability.

    Attributes:
        tof_s: Time of flight in seconds
        lerp_index: Interpolated half-max crossing index
        freq: Effective sampling frequency
        less_index: Last index below the threshold
        greater_index: First index above the threshold
        magnitudes: Linear magnitude per sample, shape (16,)
    """

    tof_s: float
    lerp_index: float
    freq: float
    less_index: int
    greater_index: int
    magnitudes: np.ndarray

    @property
    def tof_us(self) -> float:
        """Return the time of flight in microseconds."""
        return self.tof_s * 1.0e6

    @property
    def lerp_delay_us(self) -> float:
        """Return the coarse delay estimate assuming 50 us per sample."""
        return self.lerp_index * COARSE_SAMPLE_PERIOD_US
