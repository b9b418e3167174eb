"""Payroll run approval workflow with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "Draft"
    TO_APPROVE = "To Approve"
    REJECTED = "Rejected"
    APPROVED = "Approved"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Allowed transitions:
    - Draft → To Approve
    - To Approve → Approved | Rejected
    - Rejected → Draft | To Approve
    - Approved is terminal
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollRunStatus.DRAFT: [PayrollRunStatus.TO_APPROVE],
        PayrollRunStatus.TO_APPROVE: [PayrollRunStatus.APPROVED, PayrollRunStatus.REJECTED],
        PayrollRunStatus.REJECTED: [PayrollRunStatus.DRAFT, PayrollRunStatus.TO_APPROVE],
        PayrollRunStatus.APPROVED: [],  # Terminal state
    }

    APPROVER_ROLES = frozenset({"Primary Admin", "Admin", "HR"})

    # Statuses where the run may be recalculated
    CALCULATION_ALLOWED = {
        PayrollRunStatus.DRAFT,
        PayrollRunStatus.REJECTED,
    }

    @staticmethod
    def _coerce(status: str) -> PayrollRunStatus | None:
        # Accept plain strings as well as members.
        try:
            return PayrollRunStatus(status)
        except ValueError:
            return None

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(cls._coerce(from_status), [])
        return cls._coerce(to_status) in allowed

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, user_role: str | None = None
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)
        if to_status == PayrollRunStatus.APPROVED and user_role not in cls.APPROVER_ROLES:
            raise InvalidTransitionError(
                from_status, to_status, "only Admin or HR users can approve payroll runs"
            )

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if calculation is allowed in this status."""
        return cls._coerce(status) in cls.CALCULATION_ALLOWED

    @classmethod
    def can_delete(cls, status: str) -> bool:
        """Approved runs cannot be deleted."""
        return cls._coerce(status) is not PayrollRunStatus.APPROVED

    @classmethod
    def partition_deletable(cls, statuses: Iterable[str]) -> tuple[int, int]:
        """Return (deletable, undeletable) counts for a bulk delete."""
        deletable = undeletable = 0
        for status in statuses:
            if cls.can_delete(status):
                deletable += 1
            else:
                undeletable += 1
        return deletable, undeletable

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(cls._coerce(current_status), []))
