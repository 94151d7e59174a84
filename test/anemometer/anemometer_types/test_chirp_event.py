################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for chirp event and port sample types."""

from __future__ import annotations

from typing import Any

import numpy as np
import pytest

from oasis_anemometer.anemometer_types import ChirpEvent
from oasis_anemometer.anemometer_types import PortSamples


def _event(**overrides: Any) -> ChirpEvent:
    """Create a chirp event with defaults for tests."""
    fields: dict[str, Any] = {
        "t_ns": 1_000,
        "device_id": "AA:BB",
        "build": 42,
        "seqno": 1,
        "primary": 0,
        "cal_resolution": 1,
        "cal_pulse_ns": 1000,
        "payloads": (b"\x00" * 70,) * 4,
    }
    fields.update(overrides)
    return ChirpEvent(**fields)


def test_scalar_resolution_broadcast() -> None:
    """A scalar resolution should apply to every port."""
    event: ChirpEvent = _event(cal_resolution=3)
    assert event.cal_resolution == (3, 3, 3, 3)


def test_per_port_resolution() -> None:
    """Per-port resolutions should be kept in port order."""
    event: ChirpEvent = _event(cal_resolution=[1, 2, 3, 4])
    assert event.cal_resolution == (1, 2, 3, 4)


def test_payloads_normalized_to_bytes() -> None:
    """Bytearray payloads should be stored as bytes."""
    event: ChirpEvent = _event(payloads=[bytearray(70)] * 4)
    assert all(isinstance(p, bytes) for p in event.payloads)


@pytest.mark.parametrize("payload", [70, None, "00" * 70, [0] * 70])
def test_non_buffer_payload_rejected(payload: Any) -> None:
    """Payload entries must be bytes-like buffers."""
    with pytest.raises(ValueError):
        _event(payloads=(b"\x00" * 70, b"\x00" * 70, b"\x00" * 70, payload))


@pytest.mark.parametrize(
    "overrides",
    [
        {"primary": 4},
        {"primary": -1},
        {"device_id": ""},
        {"t_ns": 1.5},
        {"build": True},
        {"cal_resolution": (1, 1, 1)},
        {"payloads": (b"",) * 3},
    ],
)
def test_invalid_fields_rejected(overrides: dict[str, Any]) -> None:
    """Malformed event fields should raise ValueError."""
    with pytest.raises(ValueError):
        _event(**overrides)


def test_port_samples_range() -> None:
    """Samples must have 16 entries that fit in int16."""
    zeros: np.ndarray = np.zeros(16, dtype=np.int64)
    with pytest.raises(ValueError):
        PortSamples(2048, 0, 0, np.zeros(15, dtype=np.int64), zeros)

    big: np.ndarray = zeros.copy()
    big[0] = -40000
    with pytest.raises(ValueError):
        PortSamples(2048, 0, 0, zeros, big)
