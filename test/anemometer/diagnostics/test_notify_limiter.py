################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the annotation rate limiter."""

from __future__ import annotations

import pytest

from oasis_anemometer.diagnostics import NotifyLimiter


class _FakeClock:
    """Manually advanced clock for deterministic tests."""

    def __init__(self, now_sec: float = 0.0) -> None:
        self.now_sec: float = now_sec

    def __call__(self) -> float:
        return self.now_sec


def test_first_grant_after_interval() -> None:
    """No annotation should be granted before one interval has passed."""
    clock: _FakeClock = _FakeClock(100.0)
    limiter: NotifyLimiter = NotifyLimiter(5.0, clock=clock)

    clock.now_sec = 104.9
    assert not limiter.try_acquire()
    clock.now_sec = 105.0
    assert not limiter.try_acquire()
    clock.now_sec = 105.1
    assert limiter.try_acquire()


def test_grant_restarts_interval() -> None:
    """A grant should suppress further grants for one interval."""
    limiter: NotifyLimiter = NotifyLimiter(5.0, clock=_FakeClock(0.0))

    assert limiter.try_acquire(5.5)
    assert not limiter.try_acquire(6.0)
    assert not limiter.try_acquire(10.5)
    assert limiter.try_acquire(10.6)


def test_interval_must_be_positive() -> None:
    """A non-positive interval should be rejected."""
    with pytest.raises(ValueError):
        NotifyLimiter(0.0)
