################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-device anemometer state."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import numpy as np

from oasis_anemometer.config.anemometer_params import NUM_TRANSDUCERS
from oasis_anemometer.config.anemometer_params import GeometryParams


# Burst stamp for ToF entries that were never measured
NEVER_MEASURED: int = -1


@dataclass(frozen=True)
class DeviceSnapshot:
    """Immutable copy of a device state for observers.

    Attributes:
        device_id: Device identifier
        tof_us: Time-of-flight matrix in microseconds
        velocity_mps: Path velocity matrix in m/s
        raw_velocity: Raw cardinal velocity in m/s
        offset: Stored offset in m/s
        calibrated: Offset-corrected cardinal velocity in m/s
        filtered: Filtered cardinal velocity in m/s
        sample_count: Number of bursts processed
        stale_reciprocal_count: Velocities computed from a stale reciprocal
    """

    device_id: str
    tof_us: np.ndarray
    velocity_mps: np.ndarray
    raw_velocity: np.ndarray
    offset: np.ndarray
    calibrated: np.ndarray
    filtered: np.ndarray
    sample_count: int
    stale_reciprocal_count: int


class DeviceState:
    """Mutable measurement state for one anemometer.

    Matrices are indexed by transducer index, not port number. Callers
    mutating the state must hold ``lock``.

    Attributes:
        device_id: Device identifier
        tof_us: One-way time of flight from i to j in microseconds
        tof_burst: Burst index at which each ToF entry was last refreshed
        velocity_mps: Path velocity for pair (i, j) in m/s
        raw_velocity: Raw cardinal velocity in m/s
        offset: Stored offset in m/s, never learned in this version
        calibrated: Offset-corrected cardinal velocity in m/s
        filtered: Filtered cardinal velocity in m/s
        sample_count: Number of bursts processed
        stale_reciprocal_count: Velocities computed from a stale reciprocal
        lock: Exclusion for concurrent bursts of this device
    """

    def __init__(self, device_id: str, params: GeometryParams) -> None:
        n: int = NUM_TRANSDUCERS

        self.device_id: str = device_id

        self.tof_us: np.ndarray = np.full((n, n), params.default_tof_us)
        # Diagonal stays positive to avoid division by zero
        np.fill_diagonal(self.tof_us, params.diagonal_tof_us)
        self.tof_burst: np.ndarray = np.full((n, n), NEVER_MEASURED, dtype=np.int64)

        self.velocity_mps: np.ndarray = np.zeros((n, n))

        self.raw_velocity: np.ndarray = np.zeros(3)
        self.offset: np.ndarray = np.zeros(3)
        self.calibrated: np.ndarray = np.zeros(3)
        self.filtered: np.ndarray = np.zeros(3)

        self.sample_count: int = 0
        self.stale_reciprocal_count: int = 0

        self.lock: threading.Lock = threading.Lock()

    def snapshot(self) -> DeviceSnapshot:
        """Return an immutable copy of the current state."""
        with self.lock:
            return DeviceSnapshot(
                device_id=self.device_id,
                tof_us=self.tof_us.copy(),
                velocity_mps=self.velocity_mps.copy(),
                raw_velocity=self.raw_velocity.copy(),
                offset=self.offset.copy(),
                calibrated=self.calibrated.copy(),
                filtered=self.filtered.copy(),
                sample_count=self.sample_count,
                stale_reciprocal_count=self.stale_reciprocal_count,
            )
