"""Payroll calculation endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from rwanda_payroll.api.dependencies import (
    AppSettings,
    resolve_exemptions,
    resolve_tax_config,
    to_deduction_type,
    to_payroll_input,
    to_staff_deduction,
)
from rwanda_payroll.api.schemas import (
    AnomalyResponse,
    AppliedDeductionResponse,
    BreakdownRequest,
    BreakdownResponse,
    EmployeeRecordResponse,
    ErrorResponse,
    PayslipLine,
    RunCalculateRequest,
    RunCalculateResponse,
    RunTotalsResponse,
)
from rwanda_payroll.calculators.engine import (
    EmployeePayrollRecord,
    PayrollEngine,
    PayrollItem,
)
from rwanda_payroll.calculators.tax_calculator import compute_breakdown
from rwanda_payroll.calculators.types import PayrollBreakdown

router = APIRouter(prefix="/payroll", tags=["payroll"])


def _breakdown_response(
    breakdown: PayrollBreakdown, employee_id: str | None
) -> BreakdownResponse:
    return BreakdownResponse(employee_id=employee_id, **breakdown.to_dict())


def _record_response(record: EmployeePayrollRecord) -> EmployeeRecordResponse:
    return EmployeeRecordResponse(
        employee_id=record.employee_id,
        calculation_id=str(record.calculation_id),
        breakdown=_breakdown_response(record.breakdown, record.employee_id),
        applied_deductions=[
            AppliedDeductionResponse(
                deduction_id=a.deduction_id,
                deduction_type_id=a.deduction_type_id,
                amount_applied=a.amount_applied,
            )
            for a in record.applied_deductions
        ],
        total_other_deductions=record.total_other_deductions,
        final_net_pay=record.final_net_pay,
        lines=[
            PayslipLine(
                line_type=line.line_type.value,
                code=line.code,
                description=line.description,
                amount=line.amount,
                base=line.base,
                rate=line.rate,
            )
            for line in record.lines
        ],
    )


@router.post(
    "/breakdown",
    response_model=BreakdownResponse,
    status_code=status.HTTP_200_OK,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def calculate_breakdown(payload: BreakdownRequest) -> BreakdownResponse:
    """Calculate the statutory breakdown for one employee.

    Uses the Rwanda statutory defaults when no tax settings are supplied.
    """
    config = resolve_tax_config(payload.tax_settings)
    exemptions = resolve_exemptions(payload.exemptions)
    payroll_input = to_payroll_input(payload.input)

    breakdown = compute_breakdown(payroll_input, config, exemptions)
    return _breakdown_response(breakdown, payroll_input.employee_id)


@router.post(
    "/runs/calculate",
    response_model=RunCalculateResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse}},
)
async def calculate_run(
    payload: RunCalculateRequest, settings: AppSettings
) -> RunCalculateResponse:
    """Calculate a payroll run.

    Employees whose deductions exceed gross are reported under
    ``anomalies`` and left out of the totals.
    """
    engine = PayrollEngine(
        config=resolve_tax_config(payload.tax_settings),
        exemptions=resolve_exemptions(payload.exemptions),
        deduction_types=[to_deduction_type(t) for t in payload.deduction_types],
        settings=settings,
    )

    items = [
        PayrollItem(
            payroll_input=to_payroll_input(employee),
            deductions=tuple(
                to_staff_deduction(d, employee.employee_id) for d in employee.deductions
            ),
        )
        for employee in payload.employees
    ]
    result = engine.calculate_run(items)
    totals = result.totals

    return RunCalculateResponse(
        records=[_record_response(r) for r in result.records],
        anomalies=[
            AnomalyResponse(
                employee_id=a.employee_id,
                gross_salary=a.gross_salary,
                total_employee_deductions=a.total_employee_deductions,
                net_pay=a.net_pay,
                message=str(a),
            )
            for a in result.anomalies
        ],
        totals=RunTotalsResponse(
            employee_count=totals.employee_count,
            total_gross=totals.total_gross,
            total_paye=totals.total_paye,
            total_pension_employee=totals.total_pension_employee,
            total_pension_employer=totals.total_pension_employer,
            total_maternity_employee=totals.total_maternity_employee,
            total_maternity_employer=totals.total_maternity_employer,
            total_rama_employee=totals.total_rama_employee,
            total_rama_employer=totals.total_rama_employer,
            total_cbhi=totals.total_cbhi,
            total_employee_rssb=totals.total_employee_rssb,
            total_employer_rssb=totals.total_employer_rssb,
            total_statutory_deductions=totals.total_statutory_deductions,
            total_net_before_other_deductions=totals.total_net_before_other_deductions,
            total_other_deductions=totals.total_other_deductions,
            total_final_net=totals.total_final_net,
            deductions_by_type=totals.deductions_by_type,
        ),
        computed_at=datetime.now(timezone.utc),
    )
