"""Unit tests for the statutory tax calculator.

PAYE bands, contribution splits, CBHI and the full per-employee breakdown.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from rwanda_payroll.calculators.tax_calculator import (
    ComputationAnomaly,
    compute_breakdown,
    compute_cbhi,
    compute_contribution,
    compute_paye,
    round_currency,
)
from rwanda_payroll.calculators.tax_config import (
    RWANDA_DEFAULT_PAYE_BANDS,
    StatutoryExemptions,
)
from rwanda_payroll.calculators.types import PayrollInput


class TestComputePaye:
    """Test progressive PAYE bands."""

    @pytest.mark.parametrize(
        "income,expected",
        [
            (Decimal("0"), Decimal("0")),
            (Decimal("50000"), Decimal("0")),
            (Decimal("60000"), Decimal("0")),
            (Decimal("60001"), Decimal("0.10")),
            (Decimal("100000"), Decimal("4000")),
            (Decimal("150000"), Decimal("14000")),
            (Decimal("200000"), Decimal("24000")),
            (Decimal("250000"), Decimal("39000")),
        ],
    )
    def test_band_values(self, income, expected):
        """Each band taxes only the slice of income inside it."""
        assert compute_paye(income, RWANDA_DEFAULT_PAYE_BANDS) == expected

    def test_negative_income_is_untaxed(self):
        """Negative income yields zero tax."""
        assert compute_paye(Decimal("-5000"), RWANDA_DEFAULT_PAYE_BANDS) == Decimal("0")

    def test_limit_belongs_to_lower_band(self):
        """Income exactly on a limit is taxed at the lower band's rate."""
        at_limit = compute_paye(Decimal("100000"), RWANDA_DEFAULT_PAYE_BANDS)
        just_above = compute_paye(Decimal("100001"), RWANDA_DEFAULT_PAYE_BANDS)

        assert at_limit == Decimal("4000")
        assert just_above - at_limit == Decimal("0.20")

    def test_monotonic_in_income(self):
        """More income never means less PAYE."""
        previous = Decimal("0")
        for income in range(0, 400001, 2500):
            tax = compute_paye(Decimal(income), RWANDA_DEFAULT_PAYE_BANDS)
            assert tax >= previous
            previous = tax

    def test_linear_within_band(self):
        """Inside one band, extra income is taxed at that band's rate only."""
        low = compute_paye(Decimal("110000"), RWANDA_DEFAULT_PAYE_BANDS)
        high = compute_paye(Decimal("120000"), RWANDA_DEFAULT_PAYE_BANDS)

        assert high - low == Decimal("2000")


class TestComputeContribution:
    """Test employer/employee contribution splits."""

    def test_pension_split(self):
        """Both rates apply to the same base."""
        split = compute_contribution(Decimal("150000"), Decimal("0.08"), Decimal("0.06"))

        assert split.employer == Decimal("12000.00")
        assert split.employee == Decimal("9000.00")
        assert split.total == Decimal("21000.00")

    def test_zero_rates(self):
        """Zero rates give zero contributions."""
        split = compute_contribution(Decimal("150000"), Decimal("0"), Decimal("0"))

        assert split.employer == Decimal("0")
        assert split.employee == Decimal("0")

    def test_zero_base(self):
        """A zero base gives zero contributions."""
        split = compute_contribution(Decimal("0"), Decimal("0.08"), Decimal("0.06"))

        assert split.total == Decimal("0")

    def test_rounds_half_up_to_cents(self):
        """Each share is rounded to two decimals."""
        split = compute_contribution(Decimal("333.33"), Decimal("0.003"), Decimal("0.003"))

        assert split.employee == Decimal("1.00")


class TestComputeCbhi:
    """Test CBHI base and clamping."""

    def test_scenario_amount(self):
        """CBHI applies to gross less employee RSSB less PAYE."""
        cbhi = compute_cbhi(
            Decimal("150000"), Decimal("9450"), Decimal("14000"), Decimal("0.005")
        )
        assert cbhi == Decimal("632.75")

    def test_negative_base_clamped(self):
        """A negative base yields zero, never a negative contribution."""
        cbhi = compute_cbhi(Decimal("1000"), Decimal("800"), Decimal("500"), Decimal("0.005"))
        assert cbhi == Decimal("0.00")

    def test_half_cent_rounds_up(self):
        """5.005 rounds to 5.01."""
        cbhi = compute_cbhi(Decimal("1001"), Decimal("0"), Decimal("0"), Decimal("0.005"))
        assert cbhi == Decimal("5.01")


class TestRoundCurrency:
    """Test currency rounding."""

    def test_half_up(self):
        assert round_currency(Decimal("0.125")) == Decimal("0.13")
        assert round_currency(Decimal("0.124")) == Decimal("0.12")


class TestComputeBreakdown:
    """Test the full per-employee breakdown."""

    def test_reference_scenario(self, scenario_input, rwanda_config):
        """Gross 150,000 / basic 100,000 under the statutory defaults."""
        b = compute_breakdown(scenario_input, rwanda_config)

        assert b.paye_amount == Decimal("14000")
        assert b.pension_employee == Decimal("9000")
        assert b.pension_employer == Decimal("12000")
        assert b.maternity_employee == Decimal("450")
        assert b.maternity_employer == Decimal("450")
        assert b.rama_employee == Decimal("7500")
        assert b.rama_employer == Decimal("7500")
        assert b.employee_rssb_total == Decimal("9450")
        assert b.cbhi_amount == Decimal("632.75")
        assert b.total_employee_deductions == Decimal("31582.75")
        assert b.net_pay == Decimal("118417.25")

    def test_net_is_gross_minus_deductions(self, rwanda_config):
        """net_pay equals gross less total employee deductions exactly."""
        for gross in ("45000", "60000", "87333.33", "150000", "212345.67", "1000000"):
            gross_salary = Decimal(gross)
            payroll_input = PayrollInput(
                gross_salary=gross_salary,
                basic_salary=round_currency(gross_salary * Decimal("0.7")),
            )
            b = compute_breakdown(payroll_input, rwanda_config)

            assert b.net_pay == b.gross_salary - b.total_employee_deductions
            assert b.total_employee_deductions == (
                b.paye_amount
                + b.pension_employee
                + b.maternity_employee
                + b.rama_employee
                + b.cbhi_amount
            )

    def test_idempotent(self, scenario_input, rwanda_config):
        """Same input and config always produce the same breakdown."""
        first = compute_breakdown(scenario_input, rwanda_config)
        second = compute_breakdown(scenario_input, rwanda_config)

        assert first == second

    def test_zero_salary(self, rwanda_config):
        """Zero gross yields a zero breakdown."""
        b = compute_breakdown(PayrollInput(Decimal("0"), Decimal("0")), rwanda_config)

        assert b.total_employee_deductions == Decimal("0")
        assert b.net_pay == Decimal("0")

    def test_transport_excluded_from_maternity(self, rwanda_config):
        """Maternity is charged on gross less transport allowance."""
        payroll_input = PayrollInput(
            gross_salary=Decimal("150000"),
            basic_salary=Decimal("100000"),
            transport_allowance=Decimal("20000"),
        )
        b = compute_breakdown(payroll_input, rwanda_config)

        assert b.maternity_employee == Decimal("390.00")
        assert b.maternity_employer == Decimal("390.00")
        assert b.pension_employee == Decimal("9000.00")
        assert b.cbhi_amount == Decimal("633.05")
        assert b.net_pay == Decimal("118476.95")

    def test_rama_not_in_cbhi_base(self, scenario_input, rwanda_config):
        """Switching RAMA off removes only the RAMA deduction."""
        exemptions = StatutoryExemptions(rama_active=False)
        b = compute_breakdown(scenario_input, rwanda_config, exemptions)

        assert b.rama.total == Decimal("0")
        assert b.cbhi_amount == Decimal("632.75")
        assert b.total_employee_deductions == Decimal("24082.75")

    def test_all_schemes_disabled(self, scenario_input, rwanda_config):
        """With every scheme disabled, net equals gross."""
        exemptions = StatutoryExemptions(
            paye_active=False,
            pension_active=False,
            maternity_active=False,
            rama_active=False,
            cbhi_active=False,
        )
        b = compute_breakdown(scenario_input, rwanda_config, exemptions)

        assert b.total_employee_deductions == Decimal("0")
        assert b.total_employer_contributions == Decimal("0")
        assert b.net_pay == scenario_input.gross_salary

    def test_paye_disabled_raises_cbhi_base(self, scenario_input, rwanda_config):
        """Without PAYE the CBHI base is gross less employee RSSB."""
        b = compute_breakdown(
            scenario_input, rwanda_config, StatutoryExemptions(paye_active=False)
        )

        assert b.paye_amount == Decimal("0")
        assert b.cbhi_amount == Decimal("702.75")

    def test_negative_net_raises_anomaly(self, rwanda_config):
        """Deductions above gross are reported, not clamped."""
        config = replace(rwanda_config, pension_employee_rate=Decimal("1"))
        payroll_input = PayrollInput(
            gross_salary=Decimal("150000"),
            basic_salary=Decimal("100000"),
            employee_id="EMP-X",
        )

        with pytest.raises(ComputationAnomaly) as exc_info:
            compute_breakdown(payroll_input, config)

        assert exc_info.value.employee_id == "EMP-X"
        assert exc_info.value.total_employee_deductions == Decimal("171950.00")
        assert exc_info.value.net_pay == Decimal("-21950.00")
