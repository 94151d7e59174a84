################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Process-wide rate limiter for diagnostic annotations."""

from __future__ import annotations

import threading
import time
from typing import Callable


class NotifyLimiter:
    """Grant at most one annotation per interval.

    The first grant happens one full interval after construction.
    """

    def __init__(
        self,
        interval_sec: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_sec <= 0.0:
            raise ValueError("interval_sec must be positive")
        self._interval_sec: float = interval_sec
        self._clock: Callable[[], float] = clock
        self._last_sec: float = clock()
        self._lock: threading.Lock = threading.Lock()

    @property
    def interval_sec(self) -> float:
        return self._interval_sec

    def try_acquire(self, now_sec: float | None = None) -> bool:
        """Return True and restart the interval when an annotation is due."""
        with self._lock:
            now: float = self._clock() if now_sec is None else now_sec
            if now - self._last_sec > self._interval_sec:
                self._last_sec = now
                return True
            return False
