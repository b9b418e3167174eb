"""Payroll calculation engine - per-employee records and batch runs."""

from __future__ import annotations

import hashlib
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence
from uuid import UUID

from rwanda_payroll.calculators.deductions import (
    AppliedDeduction,
    DeductionType,
    StaffDeduction,
    apply_deductions,
)
from rwanda_payroll.calculators.gross_up import PaymentType, resolve_gross_earnings
from rwanda_payroll.calculators.line_builder import LineItemBuilder
from rwanda_payroll.calculators.tax_calculator import ComputationAnomaly, compute_breakdown
from rwanda_payroll.calculators.tax_config import (
    ALL_SCHEMES_ACTIVE,
    StatutoryExemptions,
    TaxRateConfig,
)
from rwanda_payroll.calculators.types import (
    ZERO,
    LineCandidate,
    PayrollBreakdown,
    PayrollInput,
)
from rwanda_payroll.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayrollItem:
    """One employee's entry in a payroll run."""

    payroll_input: PayrollInput
    deductions: tuple[StaffDeduction, ...] = ()
    earnings: Mapping[str, Decimal] | None = None


@dataclass
class EmployeePayrollRecord:
    """Result of calculating pay for one employee."""

    employee_id: str | None
    calculation_id: UUID
    breakdown: PayrollBreakdown
    lines: list[LineCandidate]
    inputs_fingerprint: str
    rules_fingerprint: str
    earnings: dict[str, Decimal] = field(default_factory=dict)
    applied_deductions: list[AppliedDeduction] = field(default_factory=list)
    deduction_totals_by_type: dict[str, Decimal] = field(default_factory=dict)
    total_other_deductions: Decimal = ZERO

    @property
    def gross(self) -> Decimal:
        return self.breakdown.gross_salary

    @property
    def final_net_pay(self) -> Decimal:
        """Net pay after statutory and other deductions."""
        return self.breakdown.net_pay - self.total_other_deductions


@dataclass
class PayrollRunTotals:
    """Company-level sums over the successfully calculated records."""

    employee_count: int = 0
    total_gross: Decimal = ZERO
    total_paye: Decimal = ZERO
    total_pension_employee: Decimal = ZERO
    total_pension_employer: Decimal = ZERO
    total_maternity_employee: Decimal = ZERO
    total_maternity_employer: Decimal = ZERO
    total_rama_employee: Decimal = ZERO
    total_rama_employer: Decimal = ZERO
    total_cbhi: Decimal = ZERO
    total_employee_rssb: Decimal = ZERO
    total_employer_rssb: Decimal = ZERO
    total_statutory_deductions: Decimal = ZERO
    total_net_before_other_deductions: Decimal = ZERO
    total_other_deductions: Decimal = ZERO
    total_final_net: Decimal = ZERO
    earnings_by_component: dict[str, Decimal] = field(default_factory=dict)
    deductions_by_type: dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[EmployeePayrollRecord]) -> PayrollRunTotals:
        totals = cls()
        for record in records:
            b = record.breakdown
            totals.employee_count += 1
            totals.total_gross += b.gross_salary
            totals.total_paye += b.paye_amount
            totals.total_pension_employee += b.pension.employee
            totals.total_pension_employer += b.pension.employer
            totals.total_maternity_employee += b.maternity.employee
            totals.total_maternity_employer += b.maternity.employer
            totals.total_rama_employee += b.rama.employee
            totals.total_rama_employer += b.rama.employer
            totals.total_cbhi += b.cbhi_amount
            totals.total_employee_rssb += b.employee_rssb_total
            totals.total_employer_rssb += b.employer_rssb_total
            totals.total_statutory_deductions += b.total_employee_deductions
            totals.total_net_before_other_deductions += b.net_pay
            totals.total_other_deductions += record.total_other_deductions
            totals.total_final_net += record.final_net_pay
            for component_id, amount in record.earnings.items():
                totals.earnings_by_component[component_id] = (
                    totals.earnings_by_component.get(component_id, ZERO) + amount
                )
            for type_id, amount in record.deduction_totals_by_type.items():
                totals.deductions_by_type[type_id] = (
                    totals.deductions_by_type.get(type_id, ZERO) + amount
                )
        return totals


@dataclass
class PayrollRunResult:
    """Result of calculating an entire payroll run."""

    records: list[EmployeePayrollRecord]
    anomalies: list[ComputationAnomaly]
    totals: PayrollRunTotals

    @property
    def anomaly_count(self) -> int:
        return len(self.anomalies)

    @property
    def success(self) -> bool:
        return not self.anomalies


class PayrollEngine:
    """Main payroll calculation engine for one company.

    Calculation pipeline (stable order per employee):
    1) Resolve gross earnings (gross-up of NET components, if any)
    2) Statutory breakdown: PAYE, pension, maternity, RAMA, CBHI
    3) Other deductions against net pay, in deduction type order
    4) Payslip lines
    5) Deterministic calculation id

    Records are independent of one another, so a run may be spread over a
    thread pool; results keep input order.
    """

    def __init__(
        self,
        config: TaxRateConfig,
        exemptions: StatutoryExemptions = ALL_SCHEMES_ACTIVE,
        deduction_types: Sequence[DeductionType] = (),
        settings: Settings | None = None,
    ):
        self.config = config
        self.exemptions = exemptions
        self.deduction_types = tuple(deduction_types)
        self.settings = settings or get_settings()
        self._rules_fingerprint = self._compute_rules_fingerprint()

    def calculate_employee(
        self,
        payroll_input: PayrollInput,
        deductions: Iterable[StaffDeduction] = (),
        earnings: Mapping[str, Decimal] | None = None,
        names: Mapping[str, str] | None = None,
    ) -> EmployeePayrollRecord:
        """Calculate one employee's record.

        Raises:
            ComputationAnomaly: If statutory deductions exceed gross.
        """
        deductions = tuple(deductions)
        breakdown = compute_breakdown(payroll_input, self.config, self.exemptions)

        application = apply_deductions(breakdown.net_pay, deductions, self.deduction_types)

        display_names = {t.id: t.name for t in self.deduction_types}
        display_names.update(names or {})
        lines = LineItemBuilder.build_payslip_lines(
            breakdown,
            self.config,
            earnings=earnings,
            applied_deductions=application.applied,
            names=display_names,
        )

        inputs_fingerprint = self._compute_inputs_fingerprint(payroll_input, deductions, earnings)
        return EmployeePayrollRecord(
            employee_id=payroll_input.employee_id,
            calculation_id=self._generate_calculation_id(
                payroll_input.employee_id, inputs_fingerprint, self._rules_fingerprint
            ),
            breakdown=breakdown,
            lines=lines,
            inputs_fingerprint=inputs_fingerprint,
            rules_fingerprint=self._rules_fingerprint,
            earnings=dict(earnings or {}),
            applied_deductions=application.applied,
            deduction_totals_by_type=application.totals_by_type,
            total_other_deductions=application.total_applied,
        )

    def calculate_staff_member(
        self,
        payment_types: Sequence[PaymentType],
        staff_amounts: Mapping[str, Decimal],
        employee_id: str | None = None,
        deductions: Iterable[StaffDeduction] = (),
    ) -> EmployeePayrollRecord:
        """Calculate a record from configured pay component amounts."""
        resolved = resolve_gross_earnings(
            payment_types, staff_amounts, self.config, self.exemptions, employee_id=employee_id
        )
        return self.calculate_employee(
            resolved.payroll_input,
            deductions=deductions,
            earnings=resolved.components,
            names={p.id: p.name for p in payment_types},
        )

    def calculate_run(
        self, items: Sequence[PayrollItem], max_workers: int | None = None
    ) -> PayrollRunResult:
        """Calculate every item; anomalous records are flagged and skipped."""
        workers = max_workers if max_workers is not None else self.settings.max_workers

        if workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(self._calculate_item, items))
        else:
            outcomes = [self._calculate_item(item) for item in items]

        records: list[EmployeePayrollRecord] = []
        anomalies: list[ComputationAnomaly] = []
        for outcome in outcomes:
            if isinstance(outcome, ComputationAnomaly):
                anomalies.append(outcome)
            else:
                records.append(outcome)

        totals = PayrollRunTotals.from_records(records)
        logger.info(
            "Payroll run calculated: %d record(s), %d anomaly(ies), gross %s, net %s",
            totals.employee_count,
            len(anomalies),
            totals.total_gross,
            totals.total_final_net,
        )
        return PayrollRunResult(records=records, anomalies=anomalies, totals=totals)

    def _calculate_item(
        self, item: PayrollItem
    ) -> EmployeePayrollRecord | ComputationAnomaly:
        try:
            return self.calculate_employee(
                item.payroll_input, deductions=item.deductions, earnings=item.earnings
            )
        except ComputationAnomaly as anomaly:
            logger.warning("Skipping employee %s: %s", anomaly.employee_id, anomaly)
            return anomaly

    def _generate_calculation_id(
        self,
        employee_id: str | None,
        inputs_fingerprint: str,
        rules_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": employee_id,
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
            "rules_fingerprint": rules_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(
        self,
        payroll_input: PayrollInput,
        deductions: tuple[StaffDeduction, ...],
        earnings: Mapping[str, Decimal] | None,
    ) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        data: dict[str, Any] = {
            "input": payroll_input.to_canonical_dict(),
            "earnings": {k: str(v) for k, v in (earnings or {}).items()},
            "deductions": sorted(
                [
                    {
                        "id": d.id,
                        "type": d.deduction_type_id,
                        "monthly": str(d.monthly_amount),
                        "balance": str(d.balance),
                        "start": d.start_date.isoformat(),
                    }
                    for d in deductions
                ],
                key=lambda d: d["id"],
            ),
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _compute_rules_fingerprint(self) -> str:
        """Compute fingerprint of the rate table, switches and deduction types."""
        data = {
            "rates": self.config.to_canonical_dict(),
            "exemptions": {
                "paye": self.exemptions.paye_active,
                "pension": self.exemptions.pension_active,
                "maternity": self.exemptions.maternity_active,
                "rama": self.exemptions.rama_active,
                "cbhi": self.exemptions.cbhi_active,
            },
            "deduction_types": sorted((t.id, t.order_number) for t in self.deduction_types),
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
