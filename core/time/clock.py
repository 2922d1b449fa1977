"""
BillingCore Time — Injectable Clock
=====================================
Engines never call datetime.now() directly. The Activity Log
stamps entries through a Clock so tests can pin time down.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Wall-clock UTC time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Returns a pinned timestamp until advanced or set.

    Usage:
        clock = FixedClock(datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc))
        clock.advance(60)
        assert clock.now_utc().minute == 31
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)

    def set(self, fixed_dt: datetime) -> None:
        """Jump to an arbitrary instant (may move backwards)."""
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt
