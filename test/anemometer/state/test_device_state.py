################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for per-device anemometer state."""

from __future__ import annotations

import numpy as np

from oasis_anemometer.config.anemometer_params import GeometryParams
from oasis_anemometer.state.device_state import NEVER_MEASURED
from oasis_anemometer.state.device_state import DeviceSnapshot
from oasis_anemometer.state.device_state import DeviceState


def test_initial_state() -> None:
    """A new state should hold defaults and zeroed pipeline stages."""
    state: DeviceState = DeviceState("AA:BB", GeometryParams())

    assert state.device_id == "AA:BB"
    assert np.all(np.diag(state.tof_us) == 1.0e-12)
    assert np.all(np.diag(state.tof_us) > 0.0)
    off_diagonal: np.ndarray = state.tof_us[~np.eye(4, dtype=bool)]
    assert np.all(off_diagonal == 174.92)
    assert np.all(state.tof_burst == NEVER_MEASURED)
    assert np.all(state.velocity_mps == 0.0)
    for vector in (state.raw_velocity, state.offset, state.calibrated, state.filtered):
        assert vector.shape == (3,)
        assert np.all(vector == 0.0)
    assert state.sample_count == 0
    assert state.stale_reciprocal_count == 0


def test_defaults_follow_params() -> None:
    """Initial ToF values should come from the geometry parameters."""
    state: DeviceState = DeviceState(
        "x", GeometryParams(default_tof_us=200.0, diagonal_tof_us=1.0e-9)
    )
    assert state.tof_us[0, 1] == 200.0
    assert state.tof_us[2, 2] == 1.0e-9


def test_snapshot_is_a_copy() -> None:
    """Snapshots should not alias the live matrices."""
    state: DeviceState = DeviceState("AA:BB", GeometryParams())
    state.sample_count = 3
    snapshot: DeviceSnapshot = state.snapshot()

    snapshot.tof_us[0, 1] = 1.0
    assert state.tof_us[0, 1] == 174.92
    assert snapshot.sample_count == 3


def test_states_do_not_share_arrays() -> None:
    """Two devices should have independent matrices."""
    first: DeviceState = DeviceState("a", GeometryParams())
    second: DeviceState = DeviceState("b", GeometryParams())

    first.velocity_mps[0, 1] = 1.0
    assert second.velocity_mps[0, 1] == 0.0
    assert first.lock is not second.lock
