"""
BillingCore Activity Log — Application Service
================================================
Append-only action log with a reverse-chronological feed.

- append() assigns the next id and the clock's current time
- entries are never rewritten or removed
- ordering for feeds lives in recent_first() and nowhere else
"""

from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Iterable, List, Optional, Tuple

from core.time.clock import Clock, SystemClock
from engines.activity.models import ActionLogEntry, ActionType
from engines.store.errors import ValidationError

logger = logging.getLogger("billingcore.activity")


def recent_first(
    entries: Iterable[ActionLogEntry], limit: Optional[int] = None
) -> List[ActionLogEntry]:
    """
    Newest entries first: timestamp descending, then id descending.

    limit=None returns every entry.
    """
    if limit is not None:
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise ValidationError(
                "limit must be a non-negative int.", field="limit"
            )
    ordered = sorted(entries, key=lambda e: (e.timestamp, e.id), reverse=True)
    if limit is None:
        return ordered
    return ordered[:limit]


class ActivityLog:
    """
    In-memory append-only action log.

    Owned by an EntityStore, which validates employee/branch
    references before calling append(). Thread-safe on its own
    for callers that append directly.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()
        self._entries: List[ActionLogEntry] = []
        self._next_id = 1
        self._lock = Lock()

    def append(
        self,
        action_type,
        employee_id: int,
        branch_id: int,
        description: str,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
    ) -> ActionLogEntry:
        action_type = ActionType.parse(action_type)
        with self._lock:
            entry = ActionLogEntry(
                id=self._next_id,
                timestamp=self._clock.now_utc(),
                action_type=action_type,
                employee_id=employee_id,
                branch_id=branch_id,
                description=description,
                entity_type=entity_type,
                entity_id=entity_id,
            )
            self._entries.append(entry)
            self._next_id += 1

        logger.info(
            f"Action logged: #{entry.id} {entry.action_type.value} "
            f"by employee {employee_id} at branch {branch_id}"
        )
        return entry

    # ── Query Interface ────────────────────────────────────────

    def recent_activity(self, limit: int) -> List[ActionLogEntry]:
        return recent_first(self.entries, limit)

    def by_employee(self, employee_id: int) -> List[ActionLogEntry]:
        return recent_first(e for e in self.entries if e.employee_id == employee_id)

    def by_branch(self, branch_id: int) -> List[ActionLogEntry]:
        return recent_first(e for e in self.entries if e.branch_id == branch_id)

    def by_action_type(self, action_type) -> List[ActionLogEntry]:
        wanted = ActionType.parse(action_type)
        return recent_first(e for e in self.entries if e.action_type is wanted)

    def between(self, start: datetime, end: datetime) -> List[ActionLogEntry]:
        """Entries with start <= timestamp <= end, newest first."""
        if start > end:
            raise ValidationError("start must not be after end.", field="start")
        return recent_first(
            e for e in self.entries if start <= e.timestamp <= end
        )

    @property
    def entries(self) -> Tuple[ActionLogEntry, ...]:
        """Creation-ordered, read-only copy."""
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
