################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Burst processing counters for diagnostics."""

from __future__ import annotations

import threading


class BurstCounters:
    """Track burst and ToF outcomes across all devices.

    Attributes:
        bursts_received: Count of bursts handed to the pipeline
        bursts_rejected_malformed: Bursts dropped for malformed payloads
        tofs_accepted: ToF estimates applied to device state
        tofs_rejected_degenerate: ToF estimates skipped as degenerate
        stale_reciprocal: Path velocities computed from a stale reciprocal
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self.bursts_received: int = 0
        self.bursts_rejected_malformed: int = 0
        self.tofs_accepted: int = 0
        self.tofs_rejected_degenerate: int = 0
        self.stale_reciprocal: int = 0

    def record_burst(self) -> None:
        """Record a burst arrival."""
        with self._lock:
            self.bursts_received += 1

    def reject_malformed(self) -> None:
        """Record a burst dropped for a malformed payload."""
        with self._lock:
            self.bursts_rejected_malformed += 1

    def record_tof(self, *, stale_reciprocal: bool) -> None:
        """Record an accepted ToF estimate."""
        with self._lock:
            self.tofs_accepted += 1
            if stale_reciprocal:
                self.stale_reciprocal += 1

    def reject_degenerate(self) -> None:
        """Record a ToF estimate skipped as degenerate."""
        with self._lock:
            self.tofs_rejected_degenerate += 1

    def to_dict(self) -> dict[str, int]:
        """Return a dictionary representation of the counters."""
        with self._lock:
            return {
                "bursts_received": self.bursts_received,
                "bursts_rejected_malformed": self.bursts_rejected_malformed,
                "tofs_accepted": self.tofs_accepted,
                "tofs_rejected_degenerate": self.tofs_rejected_degenerate,
                "stale_reciprocal": self.stale_reciprocal,
            }
