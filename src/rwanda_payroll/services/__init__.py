"""Payroll run services."""

from rwanda_payroll.services.state_machine import (
    InvalidTransitionError,
    PayrollRunStateMachine,
    PayrollRunStatus,
)

__all__ = [
    "PayrollRunStateMachine",
    "PayrollRunStatus",
    "InvalidTransitionError",
]
