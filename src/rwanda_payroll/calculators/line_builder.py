"""Payslip line builder with deterministic hashing."""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from typing import Mapping

from rwanda_payroll.calculators.deductions import AppliedDeduction
from rwanda_payroll.calculators.tax_calculator import round_currency
from rwanda_payroll.calculators.tax_config import TaxRateConfig
from rwanda_payroll.calculators.types import (
    ZERO,
    LineCandidate,
    LineType,
    PayrollBreakdown,
)


class LineItemBuilder:
    """Builds payslip lines from a breakdown.

    Sign conventions:
    - EARNING: positive
    - TAX (PAYE): negative
    - CONTRIBUTION (employee pension/maternity/RAMA/CBHI): negative
    - DEDUCTION (loans, advances): negative
    - EMPLOYER_CONTRIBUTION: positive (liability, excluded from net)
    """

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places."""
        return round_currency(amount)

    @staticmethod
    def compute_line_hash(line: LineCandidate) -> str:
        """Compute deterministic hash for a line item."""
        canonical = line.to_canonical_dict()
        json_str = json.dumps(canonical, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def create_earning_line(
        code: str,
        amount: Decimal,
        description: str | None = None,
        source_id: str | None = None,
    ) -> LineCandidate:
        """Create an earning line item (positive amount)."""
        return LineCandidate(
            line_type=LineType.EARNING,
            code=code,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            description=description,
            source_id=source_id,
        )

    @staticmethod
    def create_tax_line(
        amount: Decimal, base: Decimal | None = None, description: str = "PAYE"
    ) -> LineCandidate:
        """Create a PAYE line item (negative amount)."""
        return LineCandidate(
            line_type=LineType.TAX,
            code="PAYE",
            amount=-LineItemBuilder.round_to_cents(abs(amount)),
            description=description,
            base=base,
        )

    @staticmethod
    def create_contribution_line(
        code: str,
        amount: Decimal,
        base: Decimal | None = None,
        rate: Decimal | None = None,
        description: str | None = None,
    ) -> LineCandidate:
        """Create an employee contribution line item (negative amount)."""
        return LineCandidate(
            line_type=LineType.CONTRIBUTION,
            code=code,
            amount=-LineItemBuilder.round_to_cents(abs(amount)),
            description=description,
            base=base,
            rate=rate,
        )

    @staticmethod
    def create_employer_contribution_line(
        code: str,
        amount: Decimal,
        base: Decimal | None = None,
        rate: Decimal | None = None,
        description: str | None = None,
    ) -> LineCandidate:
        """Create an employer contribution line item (positive amount, liability)."""
        return LineCandidate(
            line_type=LineType.EMPLOYER_CONTRIBUTION,
            code=code,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            description=description,
            base=base,
            rate=rate,
        )

    @staticmethod
    def create_deduction_line(
        deduction_type_id: str,
        amount: Decimal,
        source_id: str | None = None,
        description: str | None = None,
    ) -> LineCandidate:
        """Create a staff deduction line item (negative amount)."""
        return LineCandidate(
            line_type=LineType.DEDUCTION,
            code=deduction_type_id,
            amount=-LineItemBuilder.round_to_cents(abs(amount)),
            description=description,
            source_id=source_id,
        )

    @staticmethod
    def build_payslip_lines(
        breakdown: PayrollBreakdown,
        config: TaxRateConfig,
        earnings: Mapping[str, Decimal] | None = None,
        applied_deductions: list[AppliedDeduction] | None = None,
        names: Mapping[str, str] | None = None,
    ) -> list[LineCandidate]:
        """Build the full, ordered set of payslip lines.

        ``earnings`` maps pay component ids to gross amounts; without it a
        single GROSS earning line is emitted. ``names`` supplies display
        names for component and deduction type ids. Zero statutory amounts
        (for example a disabled scheme) produce no line.
        """
        names = names or {}
        lines: list[LineCandidate] = []

        if earnings:
            for component_id, amount in earnings.items():
                lines.append(
                    LineItemBuilder.create_earning_line(
                        code=component_id,
                        amount=amount,
                        description=names.get(component_id, component_id),
                    )
                )
        else:
            lines.append(
                LineItemBuilder.create_earning_line(
                    code="GROSS", amount=breakdown.gross_salary, description="Gross salary"
                )
            )

        gross = breakdown.gross_salary
        net_before_cbhi = gross - breakdown.employee_rssb_total - breakdown.paye_amount

        if breakdown.paye_amount > 0:
            lines.append(LineItemBuilder.create_tax_line(breakdown.paye_amount, base=gross))

        employee_parts = [
            ("PENSION", "Pension (employee)", breakdown.pension.employee, gross, config.pension_employee_rate),
            ("MATERNITY", "Maternity (employee)", breakdown.maternity.employee, None, config.maternity_employee_rate),
            ("RAMA", "RAMA (employee)", breakdown.rama.employee, breakdown.basic_salary, config.rama_employee_rate),
            ("CBHI", "CBHI", breakdown.cbhi_amount, max(ZERO, net_before_cbhi), config.cbhi_rate),
        ]
        for code, description, amount, base, rate in employee_parts:
            if amount > 0:
                lines.append(
                    LineItemBuilder.create_contribution_line(
                        code=code, amount=amount, base=base, rate=rate, description=description
                    )
                )

        for applied in applied_deductions or []:
            lines.append(
                LineItemBuilder.create_deduction_line(
                    deduction_type_id=applied.deduction_type_id,
                    amount=applied.amount_applied,
                    source_id=applied.deduction_id,
                    description=names.get(applied.deduction_type_id, applied.deduction_type_id),
                )
            )

        employer_parts = [
            ("PENSION_ER", "Pension (employer)", breakdown.pension.employer, gross, config.pension_employer_rate),
            ("MATERNITY_ER", "Maternity (employer)", breakdown.maternity.employer, None, config.maternity_employer_rate),
            ("RAMA_ER", "RAMA (employer)", breakdown.rama.employer, breakdown.basic_salary, config.rama_employer_rate),
        ]
        for code, description, amount, base, rate in employer_parts:
            if amount > 0:
                lines.append(
                    LineItemBuilder.create_employer_contribution_line(
                        code=code, amount=amount, base=base, rate=rate, description=description
                    )
                )

        return lines

    @staticmethod
    def calculate_net_from_lines(lines: list[LineCandidate]) -> Decimal:
        """Calculate net pay from line items.

        NET = Σ(EARNING) + Σ(TAX) + Σ(CONTRIBUTION) + Σ(DEDUCTION)
        """
        net = ZERO
        for line in lines:
            if line.line_type != LineType.EMPLOYER_CONTRIBUTION:
                net += line.amount
        return LineItemBuilder.round_to_cents(net)

    @staticmethod
    def calculate_gross_from_lines(lines: list[LineCandidate]) -> Decimal:
        """GROSS = Σ(EARNING)"""
        gross = ZERO
        for line in lines:
            if line.line_type == LineType.EARNING:
                gross += line.amount
        return LineItemBuilder.round_to_cents(gross)

    @staticmethod
    def validate_line_signs(lines: list[LineCandidate]) -> list[str]:
        """Validate that all line items have correct signs.

        Returns list of error messages (empty if all valid).
        """
        errors: list[str] = []

        for i, line in enumerate(lines):
            if line.line_type in (LineType.EARNING, LineType.EMPLOYER_CONTRIBUTION):
                if line.amount < 0:
                    errors.append(
                        f"Line {i} ({line.line_type.value}) has negative amount {line.amount}, expected positive"
                    )
            elif line.amount > 0:
                errors.append(
                    f"Line {i} ({line.line_type.value}) has positive amount {line.amount}, expected negative"
                )

        return errors

    @staticmethod
    def sum_by_type(lines: list[LineCandidate]) -> dict[LineType, Decimal]:
        """Sum line amounts by type."""
        totals: dict[LineType, Decimal] = {lt: ZERO for lt in LineType}
        for line in lines:
            totals[line.line_type] += line.amount
        return totals
