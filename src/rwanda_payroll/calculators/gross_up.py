"""Net-to-gross conversion for pay components configured as take-home amounts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from rwanda_payroll.calculators.tax_calculator import compute_breakdown, round_currency
from rwanda_payroll.calculators.tax_config import (
    ALL_SCHEMES_ACTIVE,
    StatutoryExemptions,
    TaxRateConfig,
)
from rwanda_payroll.calculators.types import ZERO, PayrollInput

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 50
TOLERANCE = Decimal("0.50")


class PaymentCategory(str, Enum):
    """How a pay component amount is expressed."""

    GROSS = "Gross"
    NET = "Net"


class ComponentKind(str, Enum):
    """Which statutory bases a pay component feeds besides gross."""

    GENERAL = "general"
    BASIC_PAY = "basic_pay"  # also the RAMA base
    TRANSPORT = "transport"  # excluded from the maternity base


@dataclass(frozen=True)
class PaymentType:
    """A company pay component (basic pay, allowances, ...)."""

    id: str
    name: str
    category: PaymentCategory = PaymentCategory.GROSS
    order_number: int = 0
    kind: ComponentKind = ComponentKind.GENERAL


@dataclass(frozen=True)
class GrossEarnings:
    """Gross amount per pay component plus the resulting payroll input."""

    components: dict[str, Decimal]
    payroll_input: PayrollInput


def _with_increment(
    base: PayrollInput, amount: Decimal, kind: ComponentKind
) -> PayrollInput:
    return PayrollInput(
        gross_salary=base.gross_salary + amount,
        basic_salary=base.basic_salary + (amount if kind is ComponentKind.BASIC_PAY else ZERO),
        transport_allowance=base.transport_allowance
        + (amount if kind is ComponentKind.TRANSPORT else ZERO),
        employee_id=base.employee_id,
    )


def gross_up(
    target_net_increment: Decimal,
    base_input: PayrollInput,
    config: TaxRateConfig,
    exemptions: StatutoryExemptions = ALL_SCHEMES_ACTIVE,
    kind: ComponentKind = ComponentKind.GENERAL,
) -> Decimal:
    """Find the extra gross that raises net pay by ``target_net_increment``.

    Bisection between 0 and three times the target, starting at 1.5 times
    the target, stopping once the achieved increment is within TOLERANCE.
    If it does not converge the best guess is returned.
    """
    if target_net_increment <= 0:
        return ZERO

    low = ZERO
    high = target_net_increment * 3
    guess = target_net_increment * Decimal("1.5")

    baseline_net = compute_breakdown(base_input, config, exemptions).net_pay

    for _ in range(MAX_ITERATIONS):
        candidate = _with_increment(base_input, guess, kind)
        achieved = compute_breakdown(candidate, config, exemptions).net_pay - baseline_net
        difference = achieved - target_net_increment

        if abs(difference) <= TOLERANCE:
            return round_currency(max(ZERO, guess))

        if difference < 0:
            low = guess
        else:
            high = guess
        guess = (low + high) / 2

    logger.warning(
        "Gross-up for net increment %s did not converge within %d iterations; "
        "returning best guess %s",
        target_net_increment,
        MAX_ITERATIONS,
        guess,
    )
    return round_currency(max(ZERO, guess))


def resolve_gross_earnings(
    payment_types: Iterable[PaymentType],
    staff_amounts: Mapping[str, Decimal],
    config: TaxRateConfig,
    exemptions: StatutoryExemptions = ALL_SCHEMES_ACTIVE,
    employee_id: str | None = None,
) -> GrossEarnings:
    """Turn a staff member's configured component amounts into gross earnings.

    Components are processed in order_number order. NET components are
    grossed up on top of everything accumulated before them, so their
    position in the ordering changes the result.
    """
    components: dict[str, Decimal] = {}
    accumulated = PayrollInput(ZERO, ZERO, employee_id=employee_id)

    for payment_type in sorted(payment_types, key=lambda p: p.order_number):
        configured = Decimal(str(staff_amounts.get(payment_type.id, ZERO)))

        if payment_type.category is PaymentCategory.GROSS:
            amount = round_currency(configured)
        else:
            amount = gross_up(configured, accumulated, config, exemptions, payment_type.kind)

        components[payment_type.id] = amount
        accumulated = _with_increment(accumulated, amount, payment_type.kind)

    return GrossEarnings(components=components, payroll_input=accumulated)
