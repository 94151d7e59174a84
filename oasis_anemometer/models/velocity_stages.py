################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Cardinal velocity stages after decomposition.

raw -> calibrated -> filtered. The offset is never learned and the filter
is a pass-through, so both stages are identity in this version.
"""

from __future__ import annotations

import numpy as np

from oasis_anemometer.state.device_state import DeviceState


def apply_offset(state: DeviceState) -> np.ndarray:
    """Subtract the stored offset from the raw velocity."""
    state.calibrated = state.raw_velocity - state.offset
    return state.calibrated


def apply_filter(state: DeviceState) -> np.ndarray:
    """Pass the calibrated velocity through to the filtered output."""
    state.filtered = state.calibrated.copy()
    return state.filtered


def run_stages(state: DeviceState) -> np.ndarray:
    """Run every stage and return the filtered velocity."""
    apply_offset(state)
    return apply_filter(state)
