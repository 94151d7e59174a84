################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Registry of per-device anemometer state.

States are created lazily on first contact and live for the lifetime of
the registry. There is no eviction, so memory grows with the number of
distinct devices ever seen.

Concurrency: the map is guarded by the registry lock, which is held only
while looking up or inserting. Matrix updates are guarded by the lock of
each ``DeviceState``, so bursts for different devices never contend.
"""

from __future__ import annotations

import logging
import threading

from oasis_anemometer.config.anemometer_params import GeometryParams
from oasis_anemometer.state.device_state import DeviceState


_LOG: logging.Logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Keyed store mapping a device identifier to its state."""

    def __init__(self, params: GeometryParams) -> None:
        self._params: GeometryParams = params
        self._states: dict[str, DeviceState] = {}
        self._lock: threading.Lock = threading.Lock()

    def resolve(self, device_id: str) -> DeviceState:
        """Return the state for a device, creating it on first contact."""
        with self._lock:
            state: DeviceState | None = self._states.get(device_id)
            if state is None:
                _LOG.info("No state for device %s, creating new anemometer", device_id)
                state = DeviceState(device_id, self._params)
                self._states[device_id] = state
            return state

    def get(self, device_id: str) -> DeviceState | None:
        """Return the state for a device if it has been seen."""
        with self._lock:
            return self._states.get(device_id)

    def device_ids(self) -> list[str]:
        """Return the identifiers of all known devices."""
        with self._lock:
            return list(self._states)

    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
