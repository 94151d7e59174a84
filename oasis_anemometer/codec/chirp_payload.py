################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Codec for the per-port raw payload read from the ultrasonic ASIC.

Layout, little-endian:

    offset 0   u16  sample frequency factor
    offset 2   u16  on-chip ToF estimate
    offset 4   u16  intensity
    offset 6   16 x (i16 quadrature, i16 in-phase)

Buffers longer than 70 bytes are accepted and the tail is ignored.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from oasis_anemometer.anemometer_types import SAMPLES_PER_BURST
from oasis_anemometer.anemometer_types import PortSamples


# Header fields preceding the complex samples
_HEADER_DTYPE: np.dtype = np.dtype("<u2")
_HEADER_FIELDS: int = 3
_HEADER_BYTES: int = _HEADER_FIELDS * _HEADER_DTYPE.itemsize

# Each complex sample is stored as quadrature then in-phase
_SAMPLE_DTYPE: np.dtype = np.dtype("<i2")
_SAMPLE_BYTES: int = 2 * _SAMPLE_DTYPE.itemsize

# Minimum payload length in bytes
PAYLOAD_BYTES: int = _HEADER_BYTES + SAMPLES_PER_BURST * _SAMPLE_BYTES


class ChirpPayloadError(ValueError):
    """Raised when a raw port payload is malformed."""


def decode_port_payload(data: bytes | bytearray | memoryview) -> PortSamples:
    """Decode one port's raw payload into header fields and IQ samples."""
    buffer: bytes = bytes(data)
    if len(buffer) < PAYLOAD_BYTES:
        raise ChirpPayloadError(
            f"Payload must be at least {PAYLOAD_BYTES} bytes, got {len(buffer)}"
        )

    header: np.ndarray = np.frombuffer(
        buffer, dtype=_HEADER_DTYPE, count=_HEADER_FIELDS
    )
    samples: np.ndarray = np.frombuffer(
        buffer,
        dtype=_SAMPLE_DTYPE,
        count=2 * SAMPLES_PER_BURST,
        offset=_HEADER_BYTES,
    ).reshape((SAMPLES_PER_BURST, 2))

    return PortSamples(
        sample_freq_factor=int(header[0]),
        tof_estimate_raw=int(header[1]),
        intensity=int(header[2]),
        in_phase=samples[:, 1].copy(),
        quadrature=samples[:, 0].copy(),
    )


def encode_port_payload(
    sample_freq_factor: int,
    in_phase: Sequence[int] | np.ndarray,
    quadrature: Sequence[int] | np.ndarray,
    *,
    tof_estimate_raw: int = 0,
    intensity: int = 0,
) -> bytes:
    """Encode header fields and IQ samples into a raw port payload."""
    header_values: list[int] = [sample_freq_factor, tof_estimate_raw, intensity]
    for value in header_values:
        if not 0 <= value <= np.iinfo(np.uint16).max:
            raise ChirpPayloadError("Header fields must fit in uint16")

    # PortSamples validates the sample shapes and ranges
    port: PortSamples = PortSamples(
        sample_freq_factor=sample_freq_factor,
        tof_estimate_raw=tof_estimate_raw,
        intensity=intensity,
        in_phase=np.asarray(in_phase),
        quadrature=np.asarray(quadrature),
    )

    header: np.ndarray = np.asarray(header_values, dtype=_HEADER_DTYPE)
    samples: np.ndarray = np.empty((SAMPLES_PER_BURST, 2), dtype=_SAMPLE_DTYPE)
    samples[:, 0] = port.quadrature
    samples[:, 1] = port.in_phase

    return header.tobytes() + samples.tobytes()
