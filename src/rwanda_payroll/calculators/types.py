"""Type definitions for calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")


def to_decimal(name: str, value: Any, errors: list[str]) -> Decimal | None:
    """Parse a numeric field, appending to ``errors`` instead of raising."""
    if isinstance(value, bool) or value is None:
        errors.append(f"{name} must be a number, got {value!r}")
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors.append(f"{name} must be a number, got {value!r}")
        return None
    if not result.is_finite():
        errors.append(f"{name} must be finite, got {value!r}")
        return None
    return result


class InvalidPayrollInputError(ValueError):
    """Raised when a payroll input violates its amount constraints."""

    def __init__(self, employee_id: str | None, errors: list[str]):
        self.employee_id = employee_id
        self.errors = errors
        who = f" for employee {employee_id}" if employee_id else ""
        super().__init__(f"Invalid payroll input{who}: " + "; ".join(errors))


@dataclass(frozen=True)
class PayrollInput:
    """Compensation for one employee in one pay period."""

    gross_salary: Decimal
    basic_salary: Decimal
    transport_allowance: Decimal = ZERO  # excluded from the maternity base
    employee_id: str | None = None

    def __post_init__(self) -> None:
        errors: list[str] = []
        for name in ("gross_salary", "basic_salary", "transport_allowance"):
            value = to_decimal(name, getattr(self, name), errors)
            if value is None:
                continue
            object.__setattr__(self, name, value)
            if value < 0:
                errors.append(f"{name} must not be negative, got {value}")
        if errors:
            raise InvalidPayrollInputError(self.employee_id, errors)
        if self.basic_salary > self.gross_salary:
            errors.append(
                f"basic_salary {self.basic_salary} exceeds gross_salary {self.gross_salary}"
            )
        if self.transport_allowance > self.gross_salary:
            errors.append(
                f"transport_allowance {self.transport_allowance} exceeds "
                f"gross_salary {self.gross_salary}"
            )
        if errors:
            raise InvalidPayrollInputError(self.employee_id, errors)

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "employee_id": self.employee_id,
            "gross_salary": str(self.gross_salary),
            "basic_salary": str(self.basic_salary),
            "transport_allowance": str(self.transport_allowance),
        }


@dataclass(frozen=True)
class ContributionSplit:
    """Employer and employee share of one contribution scheme."""

    employer: Decimal = ZERO
    employee: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.employer + self.employee


@dataclass(frozen=True)
class PayrollBreakdown:
    """Statutory deductions and net pay for one PayrollInput."""

    gross_salary: Decimal
    basic_salary: Decimal
    paye_amount: Decimal
    pension: ContributionSplit
    maternity: ContributionSplit
    rama: ContributionSplit
    cbhi_amount: Decimal
    total_employee_deductions: Decimal
    net_pay: Decimal

    @property
    def pension_employee(self) -> Decimal:
        return self.pension.employee

    @property
    def pension_employer(self) -> Decimal:
        return self.pension.employer

    @property
    def maternity_employee(self) -> Decimal:
        return self.maternity.employee

    @property
    def maternity_employer(self) -> Decimal:
        return self.maternity.employer

    @property
    def rama_employee(self) -> Decimal:
        return self.rama.employee

    @property
    def rama_employer(self) -> Decimal:
        return self.rama.employer

    @property
    def employee_rssb_total(self) -> Decimal:
        """Employee RSSB share (pension + maternity), the CBHI base reduction."""
        return self.pension.employee + self.maternity.employee

    @property
    def employer_rssb_total(self) -> Decimal:
        return self.pension.employer + self.maternity.employer

    @property
    def net_pay_before_cbhi(self) -> Decimal:
        return self.net_pay + self.cbhi_amount

    @property
    def total_pension(self) -> Decimal:
        return self.pension.total

    @property
    def total_maternity(self) -> Decimal:
        return self.maternity.total

    @property
    def total_rama(self) -> Decimal:
        return self.rama.total

    @property
    def total_employer_contributions(self) -> Decimal:
        return self.pension.employer + self.maternity.employer + self.rama.employer

    def to_dict(self) -> dict[str, Decimal]:
        """Flat view for serialisation and reporting."""
        return {
            "gross_salary": self.gross_salary,
            "basic_salary": self.basic_salary,
            "paye_amount": self.paye_amount,
            "pension_employee": self.pension.employee,
            "pension_employer": self.pension.employer,
            "maternity_employee": self.maternity.employee,
            "maternity_employer": self.maternity.employer,
            "rama_employee": self.rama.employee,
            "rama_employer": self.rama.employer,
            "cbhi_amount": self.cbhi_amount,
            "employee_rssb_total": self.employee_rssb_total,
            "employer_rssb_total": self.employer_rssb_total,
            "total_employee_deductions": self.total_employee_deductions,
            "net_pay": self.net_pay,
        }


class LineType(str, Enum):
    """Payslip line item types."""

    EARNING = "EARNING"
    TAX = "TAX"
    CONTRIBUTION = "CONTRIBUTION"
    EMPLOYER_CONTRIBUTION = "EMPLOYER_CONTRIBUTION"
    DEDUCTION = "DEDUCTION"


@dataclass
class LineCandidate:
    """A payslip line before persistence or rendering."""

    line_type: LineType
    code: str
    amount: Decimal  # Final amount (signed per conventions)
    description: str | None = None
    base: Decimal | None = None
    rate: Decimal | None = None
    source_id: str | None = None

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "line_type": self.line_type.value,
            "code": self.code,
            "amount": str(self.amount),
            "base": str(self.base) if self.base is not None else None,
            "rate": str(self.rate) if self.rate is not None else None,
            "source_id": self.source_id,
        }
