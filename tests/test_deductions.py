"""Tests for recurring staff deductions taken from net pay."""

from datetime import date
from decimal import Decimal

from rwanda_payroll.calculators.deductions import StaffDeduction, apply_deductions


def _deduction(
    ded_id: str,
    type_id: str,
    monthly: str,
    balance: str,
    start: date = date(2024, 1, 1),
) -> StaffDeduction:
    return StaffDeduction(
        id=ded_id,
        deduction_type_id=type_id,
        monthly_amount=Decimal(monthly),
        balance=Decimal(balance),
        start_date=start,
    )


class TestApplyDeductions:
    """Test ordering and capping of deductions."""

    def test_types_taken_in_order_number(self, deduction_types):
        """Advances (order 1) come before loans (order 2)."""
        result = apply_deductions(
            Decimal("25000"),
            [
                _deduction("L1", "LOAN", "20000", "50000"),
                _deduction("A1", "ADVANCE", "10000", "15000"),
            ],
            deduction_types,
        )

        assert [a.deduction_id for a in result.applied] == ["A1", "L1"]
        assert result.applied[0].amount_applied == Decimal("10000")
        assert result.applied[1].amount_applied == Decimal("15000")
        assert result.total_applied == Decimal("25000")
        assert result.remaining_net == Decimal("0")

    def test_capped_by_balance(self, deduction_types):
        result = apply_deductions(
            Decimal("100000"),
            [_deduction("L1", "LOAN", "20000", "5000")],
            deduction_types,
        )

        assert result.applied[0].amount_applied == Decimal("5000")
        assert result.remaining_net == Decimal("95000")

    def test_capped_by_monthly_amount(self, deduction_types, staff_loan):
        result = apply_deductions(Decimal("100000"), [staff_loan], deduction_types)

        assert result.total_applied == Decimal("20000")
        assert result.totals_by_type == {"LOAN": Decimal("20000")}

    def test_oldest_first_within_type(self, deduction_types):
        result = apply_deductions(
            Decimal("30000"),
            [
                _deduction("L-NEW", "LOAN", "20000", "50000", date(2024, 1, 1)),
                _deduction("L-OLD", "LOAN", "20000", "50000", date(2023, 6, 1)),
            ],
            deduction_types,
        )

        assert [(a.deduction_id, a.amount_applied) for a in result.applied] == [
            ("L-OLD", Decimal("20000")),
            ("L-NEW", Decimal("10000")),
        ]

    def test_settled_deductions_skipped(self, deduction_types):
        result = apply_deductions(
            Decimal("100000"),
            [_deduction("L1", "LOAN", "20000", "0")],
            deduction_types,
        )

        assert result.applied == []
        assert result.totals_by_type == {}

    def test_unknown_type_ignored(self, deduction_types):
        result = apply_deductions(
            Decimal("100000"),
            [_deduction("X1", "UNIFORM", "5000", "5000")],
            deduction_types,
        )

        assert result.total_applied == Decimal("0")
        assert result.remaining_net == Decimal("100000")

    def test_net_never_negative(self, deduction_types):
        """No deduction is taken when there is no net pay left."""
        result = apply_deductions(
            Decimal("-10"),
            [_deduction("A1", "ADVANCE", "10000", "15000")],
            deduction_types,
        )

        assert result.applied == []
        assert result.remaining_net == Decimal("0")
