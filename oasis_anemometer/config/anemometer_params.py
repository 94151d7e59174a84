################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for the room anemometer."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any
from typing import Mapping


# Number of ultrasonic transducers on the sensor
NUM_TRANSDUCERS: int = 4

# Port number to matrix index, fixed by sensor wiring
# Port 0 is B, port 1 is D, port 2 is A, port 3 is C
GEOMETRY_PORT_TO_INDEX: tuple[int, int, int, int] = (1, 3, 0, 2)
# Tetrahedron edge length in microns
GEOMETRY_SEPARATION_UM: float = 60000.0
# Initial off-diagonal time-of-flight in microseconds
GEOMETRY_DEFAULT_TOF_US: float = 174.92
# Diagonal time-of-flight sentinel in microseconds, never zero
GEOMETRY_DIAGONAL_TOF_US: float = 1.0e-12
# Horizontal angle between the A-B edge and the A-C/B-C edges in degrees
GEOMETRY_AZIMUTH_DEG: float = 30.0
# Angle between the base plane and the edges to the apex in degrees
GEOMETRY_ELEVATION_DEG: float = 54.74
# Angle of the apex edge projections in the base plane in degrees
GEOMETRY_BEARING_DEG: float = 60.0

# Sample count offset calibrated once for the sensor class
ESTIMATOR_COUNT_OFFSET: float = -4.0
# Scale applied after dividing the crossing index by the sample frequency
ESTIMATOR_TOF_SCALE: float = 8.0
# Fixed-point scale of the sample frequency factor register
ESTIMATOR_FREQ_FACTOR_DIVISOR: float = 2048.0

# Minimum spacing of the firmware build annotation in seconds
DIAG_NOTIFY_INTERVAL_SEC: float = 5.0
# Bursts after which a reciprocal time-of-flight counts as stale
DIAG_STALE_AFTER_BURSTS: int = NUM_TRANSDUCERS - 1
# Log every burst's samples at DEBUG level
DIAG_DUMP_BURSTS: bool = False


class AnemometerParamsError(Exception):
    """Raised when anemometer parameter validation fails."""


def _require_positive(value: float, name: str) -> None:
    """Require a positive finite value."""
    _require_finite(value, name)
    if value <= 0.0:
        raise AnemometerParamsError(f"{name} must be positive")


def _require_finite(value: float, name: str) -> None:
    """Require a finite real value."""
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise AnemometerParamsError(f"{name} must be a real number")
    if not math.isfinite(value):
        raise AnemometerParamsError(f"{name} must be finite")


def _require_non_negative_int(value: int, name: str) -> None:
    """Require a non-negative integer value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise AnemometerParamsError(f"{name} must be an int")
    if value < 0:
        raise AnemometerParamsError(f"{name} must be non-negative")


@dataclass(frozen=True)
class GeometryParams:
    """Transducer layout of the tetrahedral sensor head."""

    # Port number to matrix index permutation
    port_to_index: tuple[int, ...] = GEOMETRY_PORT_TO_INDEX
    # Edge length in microns
    separation_um: float = GEOMETRY_SEPARATION_UM
    # Initial off-diagonal time-of-flight in microseconds
    default_tof_us: float = GEOMETRY_DEFAULT_TOF_US
    # Diagonal time-of-flight sentinel in microseconds
    diagonal_tof_us: float = GEOMETRY_DIAGONAL_TOF_US
    # Vertex angles used for the axis weights in degrees
    azimuth_deg: float = GEOMETRY_AZIMUTH_DEG
    elevation_deg: float = GEOMETRY_ELEVATION_DEG
    bearing_deg: float = GEOMETRY_BEARING_DEG

    def __post_init__(self) -> None:
        """Coerce the port mapping into a tuple of ints."""
        object.__setattr__(
            self, "port_to_index", tuple(int(i) for i in self.port_to_index)
        )


@dataclass(frozen=True)
class EstimatorParams:
    """Time-of-flight estimator constants."""

    # Sample count offset calibrated for the sensor class
    count_offset: float = ESTIMATOR_COUNT_OFFSET
    # Scale applied after dividing by the sample frequency
    tof_scale: float = ESTIMATOR_TOF_SCALE
    # Fixed-point scale of the sample frequency factor register
    freq_factor_divisor: float = ESTIMATOR_FREQ_FACTOR_DIVISOR


@dataclass(frozen=True)
class DiagParams:
    """Diagnostics and annotation parameters."""

    # Minimum spacing of the build annotation in seconds
    notify_interval_sec: float = DIAG_NOTIFY_INTERVAL_SEC
    # Bursts after which a reciprocal time-of-flight counts as stale
    stale_after_bursts: int = DIAG_STALE_AFTER_BURSTS
    # Log every burst's samples at DEBUG level
    dump_bursts: bool = DIAG_DUMP_BURSTS


@dataclass(frozen=True)
class AnemometerParams:
    """Complete configuration tree for the anemometer core."""

    geometry: GeometryParams
    estimator: EstimatorParams
    diag: DiagParams

    @classmethod
    def defaults(cls) -> AnemometerParams:
        """Return the default anemometer parameter tree."""
        return cls(
            geometry=GeometryParams(),
            estimator=EstimatorParams(),
            diag=DiagParams(),
        )

    @classmethod
    def from_nested_dict(cls, data: Mapping[str, Any]) -> AnemometerParams:
        """Build parameters from a nested dict, defaulting missing keys."""
        namespaces: dict[str, type] = {
            "geometry": GeometryParams,
            "estimator": EstimatorParams,
            "diag": DiagParams,
        }
        unknown: set[str] = set(data) - set(namespaces)
        if unknown:
            raise AnemometerParamsError(
                f"Unknown parameter namespaces: {sorted(unknown)}"
            )

        values: dict[str, Any] = {}
        for name, namespace_type in namespaces.items():
            section: Any = data.get(name, {})
            if not isinstance(section, Mapping):
                raise AnemometerParamsError(f"{name} must be a mapping")
            allowed: set[str] = {f.name for f in fields(namespace_type)}
            extra: set[str] = set(section) - allowed
            if extra:
                raise AnemometerParamsError(
                    f"Unknown {name} parameters: {sorted(extra)}"
                )
            try:
                values[name] = namespace_type(**section)
            except (TypeError, ValueError) as exc:
                raise AnemometerParamsError(
                    f"Invalid {name} parameters: {exc}"
                ) from exc

        return cls(**values)

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        port_to_index: tuple[int, ...] = self.geometry.port_to_index
        if sorted(port_to_index) != list(range(NUM_TRANSDUCERS)):
            raise AnemometerParamsError(
                f"geometry.port_to_index must be a permutation of "
                f"0..{NUM_TRANSDUCERS - 1}"
            )
        _require_positive(self.geometry.separation_um, "geometry.separation_um")
        _require_positive(self.geometry.default_tof_us, "geometry.default_tof_us")
        _require_positive(self.geometry.diagonal_tof_us, "geometry.diagonal_tof_us")
        _require_finite(self.geometry.azimuth_deg, "geometry.azimuth_deg")
        _require_finite(self.geometry.elevation_deg, "geometry.elevation_deg")
        _require_finite(self.geometry.bearing_deg, "geometry.bearing_deg")

        _require_finite(self.estimator.count_offset, "estimator.count_offset")
        _require_positive(self.estimator.tof_scale, "estimator.tof_scale")
        _require_positive(
            self.estimator.freq_factor_divisor, "estimator.freq_factor_divisor"
        )

        _require_positive(self.diag.notify_interval_sec, "diag.notify_interval_sec")
        _require_non_negative_int(
            self.diag.stale_after_bursts, "diag.stale_after_bursts"
        )
        if not isinstance(self.diag.dump_bursts, bool):
            raise AnemometerParamsError("diag.dump_bursts must be a bool")

    def replace(self, **namespace_overrides: Any) -> AnemometerParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses and tuples into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    if isinstance(value, tuple):
        return list(value)
    return value
