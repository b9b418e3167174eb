"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Configuration schemas
# ============================================================================


class TaxSettingsPayload(BaseModel):
    """Company tax settings as persisted: rates are percentages (8 = 8%)."""

    model_config = ConfigDict(from_attributes=True)

    company_id: str | None = None
    paye_band1_limit: Decimal
    paye_band2_limit: Decimal
    paye_band3_limit: Decimal
    paye_rate1: Decimal
    paye_rate2: Decimal
    paye_rate3: Decimal
    paye_rate4: Decimal
    pension_employer_rate: Decimal
    pension_employee_rate: Decimal
    maternity_employer_rate: Decimal
    maternity_employee_rate: Decimal
    rama_employer_rate: Decimal
    rama_employee_rate: Decimal
    cbhi_rate: Decimal


class ExemptionsPayload(BaseModel):
    """Company switches for each statutory scheme."""

    is_paye_active: bool = True
    is_pension_active: bool = True
    is_maternity_active: bool = True
    is_rama_active: bool = True
    is_cbhi_active: bool = True


class DeductionTypePayload(BaseModel):
    """Deduction category, taken in order_number order."""

    id: str
    name: str
    order_number: int = 0


class StaffDeductionPayload(BaseModel):
    """Outstanding loan or advance for one employee."""

    id: str
    deduction_type_id: str
    monthly_amount: Decimal = Field(ge=0)
    balance: Decimal = Field(ge=0)
    start_date: date


# ============================================================================
# Breakdown schemas
# ============================================================================


class PayrollInputPayload(BaseModel):
    """Compensation for one employee in one period."""

    employee_id: str | None = None
    gross_salary: Decimal = Field(ge=0)
    basic_salary: Decimal = Field(ge=0)
    transport_allowance: Decimal = Field(default=Decimal("0"), ge=0)


class BreakdownRequest(BaseModel):
    """Request a single statutory breakdown."""

    input: PayrollInputPayload
    tax_settings: TaxSettingsPayload | None = None
    exemptions: ExemptionsPayload | None = None


class BreakdownResponse(BaseModel):
    """Statutory deductions and net pay."""

    employee_id: str | None = None
    gross_salary: Decimal
    basic_salary: Decimal
    paye_amount: Decimal
    pension_employee: Decimal
    pension_employer: Decimal
    maternity_employee: Decimal
    maternity_employer: Decimal
    rama_employee: Decimal
    rama_employer: Decimal
    cbhi_amount: Decimal
    employee_rssb_total: Decimal
    employer_rssb_total: Decimal
    total_employee_deductions: Decimal
    net_pay: Decimal


# ============================================================================
# Payroll run schemas
# ============================================================================


class RunEmployeePayload(PayrollInputPayload):
    """One employee in a run, with outstanding deductions."""

    deductions: list[StaffDeductionPayload] = []


class RunCalculateRequest(BaseModel):
    """Request a payroll run calculation."""

    employees: list[RunEmployeePayload]
    tax_settings: TaxSettingsPayload | None = None
    exemptions: ExemptionsPayload | None = None
    deduction_types: list[DeductionTypePayload] = []


class PayslipLine(BaseModel):
    """Schema for a payslip line item."""

    line_type: str
    code: str
    description: str | None = None
    amount: Decimal
    base: Decimal | None = None
    rate: Decimal | None = None


class AppliedDeductionResponse(BaseModel):
    """Amount taken for one staff deduction."""

    deduction_id: str
    deduction_type_id: str
    amount_applied: Decimal


class EmployeeRecordResponse(BaseModel):
    """Schema for one employee's calculated record."""

    employee_id: str | None = None
    calculation_id: str
    breakdown: BreakdownResponse
    applied_deductions: list[AppliedDeductionResponse]
    total_other_deductions: Decimal
    final_net_pay: Decimal
    lines: list[PayslipLine]


class AnomalyResponse(BaseModel):
    """A record skipped because deductions exceed gross."""

    employee_id: str | None = None
    gross_salary: Decimal
    total_employee_deductions: Decimal
    net_pay: Decimal
    message: str


class RunTotalsResponse(BaseModel):
    """Company totals over calculated records."""

    employee_count: int
    total_gross: Decimal
    total_paye: Decimal
    total_pension_employee: Decimal
    total_pension_employer: Decimal
    total_maternity_employee: Decimal
    total_maternity_employer: Decimal
    total_rama_employee: Decimal
    total_rama_employer: Decimal
    total_cbhi: Decimal
    total_employee_rssb: Decimal
    total_employer_rssb: Decimal
    total_statutory_deductions: Decimal
    total_net_before_other_deductions: Decimal
    total_other_deductions: Decimal
    total_final_net: Decimal
    deductions_by_type: dict[str, Decimal]


class RunCalculateResponse(BaseModel):
    """Schema for payroll run calculation response."""

    records: list[EmployeeRecordResponse]
    anomalies: list[AnomalyResponse]
    totals: RunTotalsResponse
    computed_at: datetime


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
