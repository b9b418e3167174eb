"""Tax settings endpoints."""

from fastapi import APIRouter, status

from rwanda_payroll.api.dependencies import resolve_tax_config
from rwanda_payroll.api.schemas import ErrorResponse, TaxSettingsPayload
from rwanda_payroll.calculators.tax_config import (
    RWANDA_DEFAULT_TAX_CONFIG,
    tax_config_to_settings,
)

router = APIRouter(prefix="/tax-settings", tags=["tax-settings"])


@router.get(
    "/defaults",
    response_model=TaxSettingsPayload,
    status_code=status.HTTP_200_OK,
)
async def get_default_tax_settings() -> TaxSettingsPayload:
    """Rwanda statutory defaults, in persisted (percentage) form."""
    return TaxSettingsPayload(**tax_config_to_settings(RWANDA_DEFAULT_TAX_CONFIG))


@router.post(
    "/validate",
    response_model=TaxSettingsPayload,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse}},
)
async def validate_tax_settings(payload: TaxSettingsPayload) -> TaxSettingsPayload:
    """Validate company tax settings before they are saved."""
    config = resolve_tax_config(payload)
    return TaxSettingsPayload(**tax_config_to_settings(config, company_id=payload.company_id))
