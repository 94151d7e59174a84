################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the raw port payload codec."""

from __future__ import annotations

import numpy as np
import pytest

from oasis_anemometer.anemometer_types import PortSamples
from oasis_anemometer.codec.chirp_payload import PAYLOAD_BYTES
from oasis_anemometer.codec.chirp_payload import ChirpPayloadError
from oasis_anemometer.codec.chirp_payload import decode_port_payload
from oasis_anemometer.codec.chirp_payload import encode_port_payload


def _known_payload() -> bytes:
    """Build a payload byte by byte: Q = k, I = -k for sample k."""
    data: bytearray = bytearray()
    data += (2048).to_bytes(2, "little")
    data += (0x1234).to_bytes(2, "little")
    data += (7).to_bytes(2, "little")
    for k in range(16):
        data += k.to_bytes(2, "little", signed=True)
        data += (-k).to_bytes(2, "little", signed=True)
    return bytes(data)


def test_payload_length() -> None:
    """The payload should be six header bytes plus 16 complex samples."""
    assert PAYLOAD_BYTES == 70
    assert len(_known_payload()) == PAYLOAD_BYTES


def test_decode_known_bytes() -> None:
    """Header fields and sample order should decode as laid out."""
    port: PortSamples = decode_port_payload(_known_payload())

    assert port.sample_freq_factor == 2048
    assert port.tof_estimate_raw == 0x1234
    assert port.intensity == 7
    assert port.quadrature.tolist() == list(range(16))
    assert port.in_phase.tolist() == [-k for k in range(16)]
    assert port.in_phase.dtype == np.int16


def test_decode_ignores_trailing_bytes() -> None:
    """Buffers longer than the layout should decode the leading bytes."""
    port: PortSamples = decode_port_payload(_known_payload() + b"\xff" * 10)
    assert port.quadrature[15] == 15


def test_decode_rejects_short_buffer() -> None:
    """Buffers shorter than the layout should raise a validation error."""
    with pytest.raises(ChirpPayloadError):
        decode_port_payload(_known_payload()[:69])
    with pytest.raises(ValueError):
        decode_port_payload(b"")


def test_encode_matches_layout() -> None:
    """Encoding the known samples should reproduce the known bytes."""
    payload: bytes = encode_port_payload(
        2048,
        in_phase=[-k for k in range(16)],
        quadrature=list(range(16)),
        tof_estimate_raw=0x1234,
        intensity=7,
    )
    assert payload == _known_payload()


def test_encode_rejects_out_of_range() -> None:
    """Header fields and samples must fit their storage types."""
    zeros: np.ndarray = np.zeros(16, dtype=np.int64)
    with pytest.raises(ChirpPayloadError):
        encode_port_payload(70000, zeros, zeros)

    too_large: np.ndarray = zeros.copy()
    too_large[3] = 40000
    with pytest.raises(ValueError):
        encode_port_payload(2048, too_large, zeros)
