################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Diagnostics helpers for the room anemometer."""

from oasis_anemometer.diagnostics.burst_counters import BurstCounters
from oasis_anemometer.diagnostics.notify_limiter import NotifyLimiter


__all__ = [
    "BurstCounters",
    "NotifyLimiter",
]
