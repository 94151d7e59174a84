################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Path and cardinal velocity decomposition.

Path velocities use the classic transit-time formula against the currently
stored reciprocal ToF. The reciprocal may come from an earlier burst, since
one burst only refreshes the direction transmitted by its primary port.

Cardinal velocity is a weighted average of the path velocities, weighted by
how strongly each pair's edge projects onto the axis. Each unordered pair
enters once, from whichever directions have been measured: the forward
velocity, the negated reverse velocity, or their mean when both exist. The
normalizer is the upper-triangle weight sum.
"""

from __future__ import annotations

import numpy as np

from oasis_anemometer.geometry.tetrahedron import TetrahedronGeometry
from oasis_anemometer.state.device_state import NEVER_MEASURED
from oasis_anemometer.state.device_state import DeviceState


def path_velocity(
    separation_um: np.ndarray, tof_us: np.ndarray, tx: int, rx: int
) -> float:
    """Return the path velocity in m/s for the pair (tx, rx)."""
    return 0.5 * float(
        separation_um[tx, rx] / tof_us[tx, rx] - separation_um[rx, tx] / tof_us[rx, tx]
    )


def cardinal_velocity(
    velocity_mps: np.ndarray,
    geometry: TetrahedronGeometry,
    measured: np.ndarray | None = None,
) -> np.ndarray:
    """Return the (x, y, z) air velocity in m/s from the path velocity matrix.

    Args:
        velocity_mps: Path velocity matrix in m/s, shape (4, 4)
        geometry: Shared geometry model
        measured: Boolean mask of directions with a stored ToF, shape (4, 4).
            Every direction counts as measured when omitted.
    """
    if measured is None:
        measured = ~np.eye(velocity_mps.shape[0], dtype=bool)

    # Express each pair in the i -> j direction for i < j
    forward: np.ndarray = np.triu(measured, k=1)
    reverse: np.ndarray = np.triu(measured.T, k=1)
    count: np.ndarray = forward.astype(np.float64) + reverse.astype(np.float64)

    pair_sum: np.ndarray = np.where(forward, velocity_mps, 0.0) - np.where(
        reverse, velocity_mps.T, 0.0
    )
    pair_velocity: np.ndarray = np.divide(
        pair_sum, count, out=np.zeros_like(pair_sum), where=count > 0.0
    )

    numerator: np.ndarray = np.einsum(
        "ij,kij->k", pair_velocity, geometry.axis_weights
    )
    return numerator / geometry.axis_weight_sums


class VelocityDecomposer:
    """Apply ToF updates to device state and decompose cardinal velocity."""

    def __init__(
        self, geometry: TetrahedronGeometry, *, stale_after_bursts: int
    ) -> None:
        if stale_after_bursts < 0:
            raise ValueError("stale_after_bursts must be non-negative")
        self._geometry: TetrahedronGeometry = geometry
        self._stale_after_bursts: int = stale_after_bursts

    @property
    def geometry(self) -> TetrahedronGeometry:
        return self._geometry

    def apply_tof(self, state: DeviceState, tx: int, rx: int, tof_us: float) -> bool:
        """Store a ToF and refresh the pair's path velocity.

        Returns:
            True when the reciprocal ToF used for the velocity was stale
        """
        if tx == rx:
            raise ValueError("Self-pairs have no time of flight")
        if not tof_us > 0.0:
            raise ValueError("tof_us must be positive")

        burst: int = state.sample_count
        state.tof_us[tx, rx] = tof_us
        state.tof_burst[tx, rx] = burst
        state.velocity_mps[tx, rx] = path_velocity(
            self._geometry.separation_um, state.tof_us, tx, rx
        )

        reciprocal_burst: int = int(state.tof_burst[rx, tx])
        stale: bool = (
            reciprocal_burst == NEVER_MEASURED
            or burst - reciprocal_burst > self._stale_after_bursts
        )
        if stale:
            state.stale_reciprocal_count += 1

        return stale

    def decompose(self, state: DeviceState) -> np.ndarray:
        """Recompute and return the raw cardinal velocity of a device."""
        state.raw_velocity = cardinal_velocity(
            state.velocity_mps, self._geometry, state.tof_burst != NEVER_MEASURED
        )
        return state.raw_velocity
