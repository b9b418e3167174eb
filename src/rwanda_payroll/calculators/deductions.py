"""Recurring staff deductions (loans, advances) taken from net pay."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from rwanda_payroll.calculators.types import ZERO


@dataclass(frozen=True)
class DeductionType:
    """A company deduction category; lower order_number is taken first."""

    id: str
    name: str
    order_number: int = 0


@dataclass(frozen=True)
class StaffDeduction:
    """An outstanding deduction for one staff member."""

    id: str
    deduction_type_id: str
    monthly_amount: Decimal
    balance: Decimal
    start_date: date
    employee_id: str | None = None


@dataclass(frozen=True)
class AppliedDeduction:
    """Amount actually taken for one StaffDeduction this period."""

    deduction_id: str
    deduction_type_id: str
    amount_applied: Decimal


@dataclass
class DeductionApplication:
    """Result of applying deductions against available net pay."""

    applied: list[AppliedDeduction] = field(default_factory=list)
    totals_by_type: dict[str, Decimal] = field(default_factory=dict)
    total_applied: Decimal = ZERO
    remaining_net: Decimal = ZERO


def apply_deductions(
    available_net: Decimal,
    deductions: Iterable[StaffDeduction],
    deduction_types: Iterable[DeductionType],
) -> DeductionApplication:
    """Take deductions from net pay without letting it go below zero.

    Types are visited in order_number order. Within a type, deductions with
    a positive balance are taken oldest first, each for at most
    min(monthly_amount, balance, remaining net). Deductions whose type is
    not listed are ignored.
    """
    result = DeductionApplication(remaining_net=max(ZERO, available_net))
    pending = list(deductions)

    for ded_type in sorted(deduction_types, key=lambda t: t.order_number):
        of_type = sorted(
            (d for d in pending if d.deduction_type_id == ded_type.id and d.balance > 0),
            key=lambda d: d.start_date,
        )

        type_total = ZERO
        for ded in of_type:
            if result.remaining_net <= 0:
                break

            amount = min(ded.monthly_amount, ded.balance, result.remaining_net)
            if amount <= 0:
                continue

            result.applied.append(
                AppliedDeduction(
                    deduction_id=ded.id,
                    deduction_type_id=ded_type.id,
                    amount_applied=amount,
                )
            )
            type_total += amount
            result.remaining_net -= amount
            result.total_applied += amount

        if type_total > 0:
            result.totals_by_type[ded_type.id] = type_total

    return result
