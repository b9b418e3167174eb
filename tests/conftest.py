"""Pytest fixtures for payroll tax engine tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rwanda_payroll.api.app import create_app
from rwanda_payroll.calculators import (
    RWANDA_DEFAULT_TAX_CONFIG,
    DeductionType,
    PayrollInput,
    StaffDeduction,
    TaxRateConfig,
)
from rwanda_payroll.config import Settings


@pytest.fixture
def rwanda_config() -> TaxRateConfig:
    """Rwanda statutory defaults."""
    return RWANDA_DEFAULT_TAX_CONFIG


@pytest.fixture
def scenario_input() -> PayrollInput:
    """Gross 150,000 with basic 100,000 and no transport allowance."""
    return PayrollInput(
        gross_salary=Decimal("150000"),
        basic_salary=Decimal("100000"),
        employee_id="EMP-001",
    )


@pytest.fixture
def settings() -> Settings:
    """Fixed settings so calculation ids do not depend on the environment."""
    return Settings(
        engine_version="1.0.0",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
        max_workers=1,
    )


@pytest.fixture
def deduction_types() -> list[DeductionType]:
    """Salary advances are recovered before loans."""
    return [
        DeductionType(id="LOAN", name="Staff loan", order_number=2),
        DeductionType(id="ADVANCE", name="Salary advance", order_number=1),
    ]


@pytest.fixture
def staff_loan() -> StaffDeduction:
    return StaffDeduction(
        id="DED-LOAN-1",
        deduction_type_id="LOAN",
        monthly_amount=Decimal("20000"),
        balance=Decimal("50000"),
        start_date=date(2024, 1, 1),
        employee_id="EMP-001",
    )


@pytest.fixture
def settings_row() -> dict:
    """Persisted company tax settings (rates in percent)."""
    return {
        "company_id": "CMP-1",
        "paye_band1_limit": "60000",
        "paye_band2_limit": "100000",
        "paye_band3_limit": "200000",
        "paye_rate1": "0",
        "paye_rate2": "10",
        "paye_rate3": "20",
        "paye_rate4": "30",
        "pension_employer_rate": "8",
        "pension_employee_rate": "6",
        "maternity_employer_rate": "0.3",
        "maternity_employee_rate": "0.3",
        "rama_employer_rate": "7.5",
        "rama_employee_rate": "7.5",
        "cbhi_rate": "0.5",
    }


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
