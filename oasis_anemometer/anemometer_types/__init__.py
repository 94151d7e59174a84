################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Type definitions for the room anemometer."""

from __future__ import annotations

from oasis_anemometer.anemometer_types.chirp_event import SAMPLES_PER_BURST
from oasis_anemometer.anemometer_types.chirp_event import ChirpEvent
from oasis_anemometer.anemometer_types.chirp_event import PortSamples
from oasis_anemometer.anemometer_types.output_record import OutputRecord
from oasis_anemometer.anemometer_types.output_record import SkippedPair
from oasis_anemometer.anemometer_types.output_record import TofMeasure
from oasis_anemometer.anemometer_types.output_record import VelocityMeasure
from oasis_anemometer.anemometer_types.tof_estimate import HalfMaxCrossing
from oasis_anemometer.anemometer_types.tof_estimate import TofEstimate


__all__ = [
    "ChirpEvent",
    "HalfMaxCrossing",
    "OutputRecord",
    "PortSamples",
    "SAMPLES_PER_BURST",
    "SkippedPair",
    "TofEstimate",
    "TofMeasure",
    "VelocityMeasure",
]
