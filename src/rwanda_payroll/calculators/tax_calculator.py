"""Rwanda statutory payroll tax calculation.

Pure functions over Decimal. Every monetary component is rounded half-up to
two decimals as it is produced, and totals are sums of rounded components,
so ``net_pay == gross_salary - total_employee_deductions`` holds exactly.

Calculation order per employee (later steps depend on earlier ones):
1) PAYE on gross salary
2) Pension on gross salary
3) Maternity on gross salary less transport allowance
4) RAMA on basic salary
5) CBHI on gross less employee RSSB (pension + maternity) less PAYE
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from rwanda_payroll.calculators.tax_config import (
    ALL_SCHEMES_ACTIVE,
    PayeBands,
    StatutoryExemptions,
    TaxRateConfig,
)
from rwanda_payroll.calculators.types import (
    ZERO,
    ContributionSplit,
    PayrollBreakdown,
    PayrollInput,
)

CENT = Decimal("0.01")


class ComputationAnomaly(Exception):
    """Raised when valid input produces negative net pay.

    This points at a deduction configuration that takes more than the
    salary it applies to. It is reported, never corrected.
    """

    def __init__(
        self,
        employee_id: str | None,
        gross_salary: Decimal,
        total_employee_deductions: Decimal,
        net_pay: Decimal,
    ):
        self.employee_id = employee_id
        self.gross_salary = gross_salary
        self.total_employee_deductions = total_employee_deductions
        self.net_pay = net_pay
        super().__init__(
            f"Negative net pay {net_pay} for employee {employee_id or '<unknown>'}: "
            f"deductions {total_employee_deductions} exceed gross {gross_salary}"
        )


def round_currency(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_paye(income: Decimal, bands: PayeBands) -> Decimal:
    """Calculate PAYE using the four marginal bands.

    Income exactly on a limit is taxed entirely at the lower band's rate.
    """
    if income <= 0:
        return ZERO

    total_tax = ZERO
    for lower, upper, rate in bands.segments():
        if income <= lower:
            break
        top = income if upper is None else min(income, upper)
        total_tax += (top - lower) * rate

    return round_currency(total_tax)


def compute_contribution(
    base: Decimal, employer_rate: Decimal, employee_rate: Decimal
) -> ContributionSplit:
    """Apply employer and employee rates independently to the same base."""
    if base <= 0:
        return ContributionSplit()
    return ContributionSplit(
        employer=round_currency(base * employer_rate),
        employee=round_currency(base * employee_rate),
    )


def compute_cbhi(
    gross_salary: Decimal,
    employee_rssb_total: Decimal,
    paye: Decimal,
    cbhi_rate: Decimal,
) -> Decimal:
    """Calculate CBHI on gross net of employee RSSB and PAYE (floored at 0)."""
    base = max(ZERO, gross_salary - employee_rssb_total - paye)
    return round_currency(base * cbhi_rate)


def compute_breakdown(
    payroll_input: PayrollInput,
    config: TaxRateConfig,
    exemptions: StatutoryExemptions = ALL_SCHEMES_ACTIVE,
) -> PayrollBreakdown:
    """Calculate all statutory deductions and net pay for one employee.

    Raises:
        ComputationAnomaly: If deductions exceed gross salary.
    """
    gross = payroll_input.gross_salary

    paye = compute_paye(gross, config.paye) if exemptions.paye_active else ZERO

    pension = ContributionSplit()
    if exemptions.pension_active:
        pension = compute_contribution(
            gross, config.pension_employer_rate, config.pension_employee_rate
        )

    maternity = ContributionSplit()
    if exemptions.maternity_active:
        maternity = compute_contribution(
            gross - payroll_input.transport_allowance,
            config.maternity_employer_rate,
            config.maternity_employee_rate,
        )

    rama = ContributionSplit()
    if exemptions.rama_active:
        rama = compute_contribution(
            payroll_input.basic_salary, config.rama_employer_rate, config.rama_employee_rate
        )

    cbhi = ZERO
    if exemptions.cbhi_active:
        cbhi = compute_cbhi(
            gross, pension.employee + maternity.employee, paye, config.cbhi_rate
        )

    total = paye + pension.employee + maternity.employee + rama.employee + cbhi
    net = gross - total
    if net < 0:
        raise ComputationAnomaly(payroll_input.employee_id, gross, total, net)

    return PayrollBreakdown(
        gross_salary=gross,
        basic_salary=payroll_input.basic_salary,
        paye_amount=paye,
        pension=pension,
        maternity=maternity,
        rama=rama,
        cbhi_amount=cbhi,
        total_employee_deductions=total,
        net_pay=net,
    )
