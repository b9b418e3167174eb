"""Payroll tax calculation."""

from rwanda_payroll.calculators.deductions import (
    AppliedDeduction,
    DeductionType,
    StaffDeduction,
    apply_deductions,
)
from rwanda_payroll.calculators.engine import (
    EmployeePayrollRecord,
    PayrollEngine,
    PayrollItem,
    PayrollRunResult,
    PayrollRunTotals,
)
from rwanda_payroll.calculators.line_builder import LineItemBuilder
from rwanda_payroll.calculators.tax_calculator import (
    ComputationAnomaly,
    compute_breakdown,
    compute_cbhi,
    compute_contribution,
    compute_paye,
    round_currency,
)
from rwanda_payroll.calculators.tax_config import (
    RWANDA_DEFAULT_TAX_CONFIG,
    ConfigurationError,
    PayeBands,
    StatutoryExemptions,
    TaxRateConfig,
    tax_config_from_settings,
)
from rwanda_payroll.calculators.types import (
    InvalidPayrollInputError,
    PayrollBreakdown,
    PayrollInput,
)

__all__ = [
    "AppliedDeduction",
    "ComputationAnomaly",
    "ConfigurationError",
    "DeductionType",
    "EmployeePayrollRecord",
    "InvalidPayrollInputError",
    "LineItemBuilder",
    "PayeBands",
    "PayrollBreakdown",
    "PayrollEngine",
    "PayrollInput",
    "PayrollItem",
    "PayrollRunResult",
    "PayrollRunTotals",
    "RWANDA_DEFAULT_TAX_CONFIG",
    "StaffDeduction",
    "StatutoryExemptions",
    "TaxRateConfig",
    "apply_deductions",
    "compute_breakdown",
    "compute_cbhi",
    "compute_contribution",
    "compute_paye",
    "round_currency",
    "tax_config_from_settings",
]
