################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Output record types handed to the measurement sink."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class TofMeasure:
    """Time of flight between two ports.

    Attributes:
        src: Transmitting port
        dst: Receiving port
        tof_s: Time of flight in seconds
    """

    src: int
    dst: int
    tof_s: float

    def to_dict(self) -> dict[str, object]:
        """Return a dictionary representation of the measurement."""
        return {"src": self.src, "dst": self.dst, "tof_s": self.tof_s}


@dataclass(frozen=True)
class VelocityMeasure:
    """Cardinal air velocity in m/s."""

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        """Validate velocity components."""
        for name in ("x", "y", "z"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")

    def to_dict(self) -> dict[str, object]:
        """Return a dictionary representation of the velocity."""
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class SkippedPair:
    """Port pair whose ToF update was skipped for this burst.

    Attributes:
        src: Transmitting port
        dst: Receiving port
        reason: Degenerate-burst reason
    """

    src: int
    dst: int
    reason: str

    def to_dict(self) -> dict[str, object]:
        """Return a dictionary representation of the skipped pair."""
        return {"src": self.src, "dst": self.dst, "reason": self.reason}


@dataclass(frozen=True)
class OutputRecord:
    """Measurement record emitted once per burst.

    Attributes:
        t_ns: Timestamp copied from the input event
        device_id: Device identifier copied from the input event
        tofs: One measurement per accepted non-primary port
        velocities: Cardinal velocity estimates, one per burst
        diagnostics: Rate-limited annotation strings
        skipped: Pairs skipped because the burst was degenerate
    """

    t_ns: int
    device_id: str
    tofs: tuple[TofMeasure, ...] = ()
    velocities: tuple[VelocityMeasure, ...] = ()
    diagnostics: tuple[str, ...] = ()
    skipped: tuple[SkippedPair, ...] = ()

    def __post_init__(self) -> None:
        """Normalize sequences into immutable tuples."""
        object.__setattr__(self, "tofs", tuple(self.tofs))
        object.__setattr__(self, "velocities", tuple(self.velocities))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))
        object.__setattr__(self, "skipped", tuple(self.skipped))
        for item in self.diagnostics:
            if not isinstance(item, str):
                raise ValueError("diagnostics entries must be strings")

    def to_dict(self) -> dict[str, object]:
        """Return a dictionary representation of the record."""
        return {
            "t_ns": self.t_ns,
            "device_id": self.device_id,
            "tofs": [tof.to_dict() for tof in self.tofs],
            "velocities": [velocity.to_dict() for velocity in self.velocities],
            "diagnostics": list(self.diagnostics),
            "skipped": [pair.to_dict() for pair in self.skipped],
        }
