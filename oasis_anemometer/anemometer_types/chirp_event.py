################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Input event types delivered by the sensor-network transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Sequence

import numpy as np

from oasis_anemometer.config.anemometer_params import NUM_TRANSDUCERS


# Complex samples in one burst
SAMPLES_PER_BURST: int = 16


@dataclass(frozen=True)
class ChirpEvent:
    """One burst delivered by the transport for one device.

    Attributes:
        t_ns: Delivery timestamp in nanoseconds
        device_id: Opaque identifier, stable per physical unit
        build: Firmware build number, diagnostic only
        seqno: Sequence number, diagnostic only
        primary: Transmitting port for this burst
        cal_resolution: Calibration resolution per port
        cal_pulse_ns: Calibration pulse width in nanoseconds
        payloads: Raw per-port buffers, one per port
    """

    t_ns: int
    device_id: str
    build: int
    seqno: int
    primary: int
    cal_resolution: tuple[int, ...]
    cal_pulse_ns: int
    payloads: tuple[bytes, ...]

    def __post_init__(self) -> None:
        """Validate event fields and normalize sequences."""
        _require_int(self.t_ns, "t_ns")
        if not isinstance(self.device_id, str) or not self.device_id:
            raise ValueError("device_id must be a non-empty str")
        _require_int(self.build, "build")
        _require_int(self.seqno, "seqno")
        _require_int(self.primary, "primary")
        if not 0 <= self.primary < NUM_TRANSDUCERS:
            raise ValueError(f"primary must be in 0..{NUM_TRANSDUCERS - 1}")
        _require_int(self.cal_pulse_ns, "cal_pulse_ns")

        # A single resolution applies to every port
        cal_resolution: tuple[int, ...]
        if isinstance(self.cal_resolution, int):
            cal_resolution = (self.cal_resolution,) * NUM_TRANSDUCERS
        else:
            cal_resolution = tuple(self.cal_resolution)
        if len(cal_resolution) != NUM_TRANSDUCERS:
            raise ValueError(f"cal_resolution must have {NUM_TRANSDUCERS} entries")
        for value in cal_resolution:
            _require_int(value, "cal_resolution")

        # Integers would otherwise become zero-filled buffers
        raw_payloads: tuple[Any, ...] = tuple(self.payloads)
        for payload in raw_payloads:
            if not isinstance(payload, (bytes, bytearray, memoryview)):
                raise ValueError("payloads must contain bytes-like buffers")
        payloads: tuple[bytes, ...] = tuple(bytes(p) for p in raw_payloads)
        if len(payloads) != NUM_TRANSDUCERS:
            raise ValueError(f"payloads must have {NUM_TRANSDUCERS} entries")

        object.__setattr__(self, "cal_resolution", cal_resolution)
        object.__setattr__(self, "payloads", payloads)


@dataclass(frozen=True)
class PortSamples:
    """Decoded contents of one port's raw payload.

    Attributes:
        sample_freq_factor: Sample frequency register, fixed point /2048
        tof_estimate_raw: On-chip ToF estimate register, diagnostic only
        intensity: On-chip intensity register, diagnostic only
        in_phase: In-phase samples, int16, shape (16,)
        quadrature: Quadrature samples, int16, shape (16,)
    """

    sample_freq_factor: int
    tof_estimate_raw: int
    intensity: int
    in_phase: np.ndarray
    quadrature: np.ndarray

    def __post_init__(self) -> None:
        """Coerce sample arrays to int16."""
        object.__setattr__(
            self, "in_phase", _as_int16_samples(self.in_phase, "in_phase")
        )
        object.__setattr__(
            self, "quadrature", _as_int16_samples(self.quadrature, "quadrature")
        )


def _require_int(value: object, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")


def _as_int16_samples(values: Sequence[int] | np.ndarray, name: str) -> np.ndarray:
    """Coerce samples to an int16 array with one entry per burst sample."""
    array: np.ndarray = np.asarray(values)
    if array.shape != (SAMPLES_PER_BURST,):
        raise ValueError(f"{name} must have shape ({SAMPLES_PER_BURST},)")
    if not np.issubdtype(array.dtype, np.integer):
        raise ValueError(f"{name} must contain integers")
    if np.any(array < np.iinfo(np.int16).min) or np.any(
        array > np.iinfo(np.int16).max
    ):
        raise ValueError(f"{name} must fit in int16")
    return array.astype(np.int16)
