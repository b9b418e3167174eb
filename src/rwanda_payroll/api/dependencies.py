"""FastAPI dependencies and request-to-domain conversion."""

from typing import Annotated

from fastapi import Depends

from rwanda_payroll.api.schemas import (
    DeductionTypePayload,
    ExemptionsPayload,
    PayrollInputPayload,
    StaffDeductionPayload,
    TaxSettingsPayload,
)
from rwanda_payroll.calculators.deductions import DeductionType, StaffDeduction
from rwanda_payroll.calculators.tax_config import (
    ALL_SCHEMES_ACTIVE,
    RWANDA_DEFAULT_TAX_CONFIG,
    StatutoryExemptions,
    TaxRateConfig,
    exemptions_from_company,
    tax_config_from_settings,
)
from rwanda_payroll.calculators.types import PayrollInput
from rwanda_payroll.config import Settings, get_settings


def get_app_settings() -> Settings:
    """Get settings dependency."""
    return get_settings()


def resolve_tax_config(payload: TaxSettingsPayload | None) -> TaxRateConfig:
    """Validated config from request settings, or the statutory defaults."""
    if payload is None:
        return RWANDA_DEFAULT_TAX_CONFIG
    return tax_config_from_settings(payload.model_dump())


def resolve_exemptions(payload: ExemptionsPayload | None) -> StatutoryExemptions:
    if payload is None:
        return ALL_SCHEMES_ACTIVE
    return exemptions_from_company(payload.model_dump())


def to_payroll_input(payload: PayrollInputPayload) -> PayrollInput:
    return PayrollInput(
        gross_salary=payload.gross_salary,
        basic_salary=payload.basic_salary,
        transport_allowance=payload.transport_allowance,
        employee_id=payload.employee_id,
    )


def to_staff_deduction(payload: StaffDeductionPayload, employee_id: str | None) -> StaffDeduction:
    return StaffDeduction(
        id=payload.id,
        deduction_type_id=payload.deduction_type_id,
        monthly_amount=payload.monthly_amount,
        balance=payload.balance,
        start_date=payload.start_date,
        employee_id=employee_id,
    )


def to_deduction_type(payload: DeductionTypePayload) -> DeductionType:
    return DeductionType(id=payload.id, name=payload.name, order_number=payload.order_number)


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_app_settings)]
