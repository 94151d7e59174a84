################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tetrahedral transducer geometry for the room anemometer.

Transducers are labelled A, B, C and D. A, B and C form the base triangle
and D is the apex. Matrix index 0..3 corresponds to A..D; the physical port
numbers reach these indices through ``port_to_index``.

The axis weights are the projections of each edge onto the x, y and z axes.
They are not unit vectors per edge. Normalization happens per axis during
velocity decomposition by dividing by the upper-triangle weight sum.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from oasis_anemometer.config.anemometer_params import NUM_TRANSDUCERS
from oasis_anemometer.config.anemometer_params import GeometryParams


# Matrix indices of the four transducers
IDX_A: int = 0
IDX_B: int = 1
IDX_C: int = 2
IDX_D: int = 3

# Cardinal axis indices
AXIS_X: int = 0
AXIS_Y: int = 1
AXIS_Z: int = 2

# Tolerance for a per-axis weight sum to count as zero
WEIGHT_SUM_EPS: float = 1e-9


class GeometryError(Exception):
    """Raised when the geometry model violates its invariants."""


@dataclass(frozen=True)
class TetrahedronGeometry:
    """Immutable geometry model shared by all devices.

    Attributes:
        port_to_index: Port number to matrix index permutation, shape (4,)
        separation_um: Transducer separation in microns, shape (4, 4)
        axis_weights: Per-axis edge projection weights, shape (3, 4, 4)
        axis_weight_sums: Upper-triangle weight sum per axis, shape (3,)
    """

    port_to_index: np.ndarray
    separation_um: np.ndarray
    axis_weights: np.ndarray
    axis_weight_sums: np.ndarray

    def port_pair_to_indices(self, primary: int, port: int) -> tuple[int, int]:
        """Return the (tx, rx) matrix indices for a transmit/receive port pair."""
        if not 0 <= primary < NUM_TRANSDUCERS:
            raise ValueError(f"primary port {primary} out of range")
        if not 0 <= port < NUM_TRANSDUCERS:
            raise ValueError(f"port {port} out of range")
        return int(self.port_to_index[primary]), int(self.port_to_index[port])


def axis_weight_tensor(
    azimuth_deg: float, elevation_deg: float, bearing_deg: float
) -> np.ndarray:
    """Return the antisymmetric (3, 4, 4) axis weight tensor."""
    azimuth: float = math.radians(azimuth_deg)
    elevation: float = math.radians(elevation_deg)
    bearing: float = math.radians(bearing_deg)

    weights: np.ndarray = np.zeros((3, NUM_TRANSDUCERS, NUM_TRANSDUCERS))

    weights[AXIS_X, IDX_A, IDX_C] = math.cos(azimuth)
    weights[AXIS_X, IDX_B, IDX_C] = math.cos(azimuth)
    weights[AXIS_X, IDX_A, IDX_D] = math.cos(elevation) * math.sin(bearing)
    weights[AXIS_X, IDX_B, IDX_D] = math.cos(elevation) * math.sin(bearing)
    weights[AXIS_X, IDX_C, IDX_D] = -math.cos(elevation)

    weights[AXIS_Y, IDX_A, IDX_B] = 1.0
    weights[AXIS_Y, IDX_A, IDX_C] = math.sin(azimuth)
    weights[AXIS_Y, IDX_A, IDX_D] = math.cos(elevation) * math.cos(bearing)
    weights[AXIS_Y, IDX_B, IDX_C] = -math.sin(azimuth)
    weights[AXIS_Y, IDX_B, IDX_D] = -math.cos(elevation) * math.cos(bearing)

    weights[AXIS_Z, IDX_A, IDX_D] = math.sin(elevation)
    weights[AXIS_Z, IDX_B, IDX_D] = math.sin(elevation)
    weights[AXIS_Z, IDX_C, IDX_D] = math.sin(elevation)

    # Reverse direction of every pair projects with the opposite sign
    return weights - np.transpose(weights, (0, 2, 1))


def upper_triangle_sums(axis_weights: np.ndarray) -> np.ndarray:
    """Return the per-axis sum of weights over pairs with i < j."""
    mask: np.ndarray = np.triu(np.ones((NUM_TRANSDUCERS, NUM_TRANSDUCERS)), k=1)
    return np.sum(axis_weights * mask, axis=(1, 2))


def build_geometry(params: GeometryParams) -> TetrahedronGeometry:
    """Build and validate the geometry model from parameters."""
    port_to_index: np.ndarray = np.asarray(params.port_to_index, dtype=np.int64)

    separation_um: np.ndarray = np.full(
        (NUM_TRANSDUCERS, NUM_TRANSDUCERS), params.separation_um, dtype=np.float64
    )
    np.fill_diagonal(separation_um, 0.0)

    axis_weights: np.ndarray = axis_weight_tensor(
        params.azimuth_deg, params.elevation_deg, params.bearing_deg
    )

    geometry: TetrahedronGeometry = TetrahedronGeometry(
        port_to_index=port_to_index,
        separation_um=separation_um,
        axis_weights=axis_weights,
        axis_weight_sums=upper_triangle_sums(axis_weights),
    )
    validate_geometry(geometry)

    # Shared across devices and threads
    for array in (
        geometry.port_to_index,
        geometry.separation_um,
        geometry.axis_weights,
        geometry.axis_weight_sums,
    ):
        array.setflags(write=False)

    return geometry


def validate_geometry(geometry: TetrahedronGeometry) -> None:
    """Validate geometry invariants, raising GeometryError on violation."""
    n: int = NUM_TRANSDUCERS

    if geometry.port_to_index.shape != (n,):
        raise GeometryError(f"port_to_index must have shape ({n},)")
    if sorted(geometry.port_to_index.tolist()) != list(range(n)):
        raise GeometryError("port_to_index must be a permutation")

    separation: np.ndarray = geometry.separation_um
    if separation.shape != (n, n):
        raise GeometryError(f"separation_um must have shape ({n}, {n})")
    if not np.all(np.isfinite(separation)):
        raise GeometryError("separation_um must be finite")
    if np.any(np.diag(separation) != 0.0):
        raise GeometryError("separation_um diagonal must be zero")
    if not np.array_equal(separation, separation.T):
        raise GeometryError("separation_um must be symmetric")
    off_diagonal: np.ndarray = separation[~np.eye(n, dtype=bool)]
    if np.any(off_diagonal <= 0.0):
        raise GeometryError("separation_um off-diagonal must be positive")

    weights: np.ndarray = geometry.axis_weights
    if weights.shape != (3, n, n):
        raise GeometryError(f"axis_weights must have shape (3, {n}, {n})")
    if not np.all(np.isfinite(weights)):
        raise GeometryError("axis_weights must be finite")
    if np.any(np.diagonal(weights, axis1=1, axis2=2) != 0.0):
        raise GeometryError("axis_weights diagonal must be zero")
    if not np.array_equal(weights, -np.transpose(weights, (0, 2, 1))):
        raise GeometryError("axis_weights must be antisymmetric for every axis")

    sums: np.ndarray = geometry.axis_weight_sums
    if sums.shape != (3,):
        raise GeometryError("axis_weight_sums must have shape (3,)")
    if np.any(np.abs(sums) <= WEIGHT_SUM_EPS):
        raise GeometryError("axis_weight_sums must be non-zero for every axis")
