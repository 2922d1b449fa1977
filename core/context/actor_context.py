"""
BillingCore Context - ActorContext
====================================
Identity of whoever issues a command, as handed over by the
presentation layer. The core never authenticates; it only
attributes mutations and log entries to this actor.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    """
    Authenticated actor for a single command.

    employee_id and branch_id must reference existing rows; the
    Entity Store checks that before applying a mutation.
    """

    employee_id: int
    branch_id: int

    def __post_init__(self):
        for name in ("employee_id", "branch_id"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int.")

    def to_dict(self) -> dict:
        return {"employee_id": self.employee_id, "branch_id": self.branch_id}
