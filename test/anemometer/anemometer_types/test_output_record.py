################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for output record types."""

from __future__ import annotations

import pytest

from oasis_anemometer.anemometer_types import OutputRecord
from oasis_anemometer.anemometer_types import SkippedPair
from oasis_anemometer.anemometer_types import TofMeasure
from oasis_anemometer.anemometer_types import VelocityMeasure


def test_record_to_dict() -> None:
    """Records should serialize every field."""
    record: OutputRecord = OutputRecord(
        t_ns=5,
        device_id="AA:BB",
        tofs=[TofMeasure(0, 1, 1.5e-4)],
        velocities=[VelocityMeasure(0.1, -0.2, 0.0)],
        diagnostics=["anemometer AA:BB build is 42"],
        skipped=[SkippedPair(0, 2, "no_signal")],
    )

    assert record.to_dict() == {
        "t_ns": 5,
        "device_id": "AA:BB",
        "tofs": [{"src": 0, "dst": 1, "tof_s": 1.5e-4}],
        "velocities": [{"x": 0.1, "y": -0.2, "z": 0.0}],
        "diagnostics": ["anemometer AA:BB build is 42"],
        "skipped": [{"src": 0, "dst": 2, "reason": "no_signal"}],
    }
    assert isinstance(record.tofs, tuple)


def test_record_defaults_empty() -> None:
    """Optional sequences should default to empty tuples."""
    record: OutputRecord = OutputRecord(t_ns=0, device_id="x")
    assert record.tofs == ()
    assert record.diagnostics == ()


def test_velocity_must_be_finite() -> None:
    """Non-finite velocity components should raise."""
    with pytest.raises(ValueError):
        VelocityMeasure(float("nan"), 0.0, 0.0)


def test_diagnostics_must_be_strings() -> None:
    """Diagnostic entries should be strings."""
    with pytest.raises(ValueError):
        OutputRecord(t_ns=0, device_id="x", diagnostics=[3])  # type: ignore[list-item]
