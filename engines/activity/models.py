"""
BillingCore Activity Log — Entries
====================================
Immutable records of business-mutating events. An entry is
evidence of a mutation that already happened; it is never edited
or removed after creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from engines.store.errors import ValidationError


class ActionType(Enum):
    """What kind of mutation an entry records."""
    SALE = "Sale"
    STOCK_UPDATE = "Stock Update"
    PRODUCT_CREATED = "Product Created"
    BRANCH_CREATED = "Branch Created"
    EMPLOYEE_CREATED = "Employee Created"
    CUSTOMER_GROUP_CREATED = "Customer Group Created"

    @classmethod
    def parse(cls, value) -> ActionType:
        """Accept a member, its value ("Stock Update") or its name ("STOCK_UPDATE")."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name):
                return member
        raise ValidationError(
            f"Unknown action type '{value}'.", field="action_type"
        )


@dataclass(frozen=True)
class ActionLogEntry:
    """
    One line of the action log.

    id is assigned by the ActivityLog and increases strictly with
    creation order; it breaks ties between equal timestamps.
    employee_id and branch_id are resolved by the EntityStore
    before it appends.
    """

    id: int
    timestamp: datetime
    action_type: ActionType
    employee_id: int
    branch_id: int
    description: str
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None

    def __post_init__(self):
        if self.timestamp.tzinfo is None:
            raise ValidationError(
                "timestamp must be timezone-aware.", field="timestamp"
            )
        if not isinstance(self.action_type, ActionType):
            raise ValidationError(
                "action_type must be ActionType enum.", field="action_type"
            )
        if not self.description or not isinstance(self.description, str):
            raise ValidationError(
                "description must be a non-empty string.", field="description"
            )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action_type": self.action_type.value,
            "employee_id": self.employee_id,
            "branch_id": self.branch_id,
            "description": self.description,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
        }
