"""Per-company statutory rate configuration.

A company's tax settings are persisted with rates scaled as percentages
(``8`` meaning 8%). Inside the engine every rate is a decimal fraction
(``Decimal("0.08")``). The loaders in this module are the only place where
that conversion happens, and every configuration they produce has already
been validated.

Rules:
    1. No globals that change. Each calculation receives its config.
    2. Immutable after creation (frozen dataclasses).
    3. Invalid configuration fails here, never per employee.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping

from rwanda_payroll.calculators.types import to_decimal

HUNDRED = Decimal("100")


class ConfigurationError(ValueError):
    """Raised when a tax rate configuration is malformed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid tax configuration: " + "; ".join(errors))


def _canonical(value: Decimal) -> str:
    return f"{value.normalize():f}"


def _coerce_fields(obj: Any, names: tuple[str, ...], errors: list[str]) -> None:
    for name in names:
        value = to_decimal(name, getattr(obj, name), errors)
        if value is not None:
            object.__setattr__(obj, name, value)


def _check_rates(obj: Any, names: tuple[str, ...], errors: list[str]) -> None:
    for name in names:
        rate = getattr(obj, name)
        if isinstance(rate, Decimal) and not (Decimal("0") <= rate <= Decimal("1")):
            errors.append(f"{name} must be between 0 and 1, got {rate}")


@dataclass(frozen=True)
class PayeBands:
    """PAYE thresholds and marginal rates.

    Limits are cumulative: rate1 applies up to band1_limit (inclusive),
    rate2 to the slice above band1_limit up to band2_limit, rate3 up to
    band3_limit, rate4 to everything above band3_limit.
    """

    band1_limit: Decimal
    band2_limit: Decimal
    band3_limit: Decimal
    rate1: Decimal
    rate2: Decimal
    rate3: Decimal
    rate4: Decimal

    LIMITS = ("band1_limit", "band2_limit", "band3_limit")
    RATES = ("rate1", "rate2", "rate3", "rate4")

    def __post_init__(self) -> None:
        """Validate configuration."""
        errors: list[str] = []
        _coerce_fields(self, self.LIMITS + self.RATES, errors)
        _check_rates(self, self.RATES, errors)

        limits = [getattr(self, name) for name in self.LIMITS]
        if all(isinstance(limit, Decimal) for limit in limits):
            for name, limit in zip(self.LIMITS, limits):
                if limit < 0:
                    errors.append(f"{name} must not be negative, got {limit}")
            if not limits[0] < limits[1] < limits[2]:
                errors.append(
                    "band limits must be strictly increasing, got "
                    f"{limits[0]}, {limits[1]}, {limits[2]}"
                )

        if errors:
            raise ConfigurationError(errors)

    def segments(self) -> list[tuple[Decimal, Decimal | None, Decimal]]:
        """Return (lower, upper, rate) per band; upper None = no cap."""
        return [
            (Decimal("0"), self.band1_limit, self.rate1),
            (self.band1_limit, self.band2_limit, self.rate2),
            (self.band2_limit, self.band3_limit, self.rate3),
            (self.band3_limit, None, self.rate4),
        ]


@dataclass(frozen=True)
class TaxRateConfig:
    """Validated statutory rates for one company (or the global default)."""

    paye: PayeBands
    pension_employer_rate: Decimal
    pension_employee_rate: Decimal
    maternity_employer_rate: Decimal
    maternity_employee_rate: Decimal
    rama_employer_rate: Decimal
    rama_employee_rate: Decimal
    cbhi_rate: Decimal
    company_id: str | None = None

    RATES = (
        "pension_employer_rate",
        "pension_employee_rate",
        "maternity_employer_rate",
        "maternity_employee_rate",
        "rama_employer_rate",
        "rama_employee_rate",
        "cbhi_rate",
    )

    def __post_init__(self) -> None:
        """Validate configuration."""
        errors: list[str] = []
        if not isinstance(self.paye, PayeBands):
            errors.append("paye must be a PayeBands instance")
        _coerce_fields(self, self.RATES, errors)
        _check_rates(self, self.RATES, errors)
        if errors:
            raise ConfigurationError(errors)

    def to_canonical_dict(self) -> dict[str, str]:
        """Return canonical dict for fingerprinting (company id excluded).

        Values are normalised so 0.1 and 0.10 fingerprint identically.
        """
        canonical = {
            name: _canonical(getattr(self.paye, name))
            for name in PayeBands.LIMITS + PayeBands.RATES
        }
        canonical.update({name: _canonical(getattr(self, name)) for name in self.RATES})
        return canonical

    def fingerprint(self) -> str:
        """Deterministic hash of the rate table."""
        json_str = json.dumps(self.to_canonical_dict(), sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]


@dataclass(frozen=True)
class StatutoryExemptions:
    """Company-level switches for each statutory scheme.

    A disabled scheme contributes nothing, for employer and employee alike.
    """

    paye_active: bool = True
    pension_active: bool = True
    maternity_active: bool = True
    rama_active: bool = True
    cbhi_active: bool = True


ALL_SCHEMES_ACTIVE = StatutoryExemptions()


# Persisted settings column -> (section, field)
_SETTINGS_FIELDS: dict[str, tuple[str, str]] = {
    "paye_band1_limit": ("paye", "band1_limit"),
    "paye_band2_limit": ("paye", "band2_limit"),
    "paye_band3_limit": ("paye", "band3_limit"),
    "paye_rate1": ("paye", "rate1"),
    "paye_rate2": ("paye", "rate2"),
    "paye_rate3": ("paye", "rate3"),
    "paye_rate4": ("paye", "rate4"),
    "pension_employer_rate": ("config", "pension_employer_rate"),
    "pension_employee_rate": ("config", "pension_employee_rate"),
    "maternity_employer_rate": ("config", "maternity_employer_rate"),
    "maternity_employee_rate": ("config", "maternity_employee_rate"),
    "rama_employer_rate": ("config", "rama_employer_rate"),
    "rama_employee_rate": ("config", "rama_employee_rate"),
    "cbhi_rate": ("config", "cbhi_rate"),
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def tax_config_from_settings(row: Mapping[str, Any]) -> TaxRateConfig:
    """Build a validated TaxRateConfig from a persisted settings row.

    Rates in the row are percentages and are divided by 100; band limits
    are monetary amounts and are taken as-is. Both snake_case and camelCase
    keys are accepted.

    Raises:
        ConfigurationError: If a field is missing, non-numeric or invalid.
    """
    errors: list[str] = []
    values: dict[str, dict[str, Decimal]] = {"paye": {}, "config": {}}

    for column, (section, field_name) in _SETTINGS_FIELDS.items():
        raw = row.get(column, row.get(_camel(column)))
        if raw is None:
            errors.append(f"{column} is required")
            continue
        value = to_decimal(column, raw, errors)
        if value is None:
            continue
        if field_name.startswith("band"):
            values[section][field_name] = value
        else:
            values[section][field_name] = value / HUNDRED

    if errors:
        raise ConfigurationError(errors)

    company_id = row.get("company_id", row.get("companyId"))
    return TaxRateConfig(
        paye=PayeBands(**values["paye"]),
        company_id=str(company_id) if company_id is not None else None,
        **values["config"],
    )


def tax_config_to_settings(
    config: TaxRateConfig, company_id: str | None = None
) -> dict[str, Any]:
    """Inverse of tax_config_from_settings (rates back to percentages)."""
    row: dict[str, Any] = {"company_id": company_id or config.company_id}
    for column, (section, field_name) in _SETTINGS_FIELDS.items():
        source = config.paye if section == "paye" else config
        value = getattr(source, field_name)
        row[column] = value if field_name.startswith("band") else value * HUNDRED
    return row


_TRUE_FLAGS = frozenset({"true", "t", "yes", "y", "1", "on"})
_FALSE_FLAGS = frozenset({"false", "f", "no", "n", "0", "off"})


def _to_flag(column: str, value: Any, errors: list[str]) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
    errors.append(f"{column} must be a boolean flag, got {value!r}")
    return True


def exemptions_from_company(row: Mapping[str, Any]) -> StatutoryExemptions:
    """Read scheme switches from a company profile row (missing = active).

    Flags may be booleans, 0/1 or strings such as "true" and "false".

    Raises:
        ConfigurationError: If a flag cannot be read as a boolean.
    """
    errors: list[str] = []
    kwargs = {}
    for f in fields(StatutoryExemptions):
        scheme = f.name.removesuffix("_active")
        column = f"is_{scheme}_active"
        value = row.get(column, row.get(_camel(column)))
        kwargs[f.name] = _to_flag(column, value, errors)
    if errors:
        raise ConfigurationError(errors)
    return StatutoryExemptions(**kwargs)


# Rwanda statutory defaults (monthly, RWF)
RWANDA_DEFAULT_PAYE_BANDS = PayeBands(
    band1_limit=Decimal("60000"),
    band2_limit=Decimal("100000"),
    band3_limit=Decimal("200000"),
    rate1=Decimal("0.00"),
    rate2=Decimal("0.10"),
    rate3=Decimal("0.20"),
    rate4=Decimal("0.30"),
)

RWANDA_DEFAULT_TAX_CONFIG = TaxRateConfig(
    paye=RWANDA_DEFAULT_PAYE_BANDS,
    pension_employer_rate=Decimal("0.08"),
    pension_employee_rate=Decimal("0.06"),
    maternity_employer_rate=Decimal("0.003"),
    maternity_employee_rate=Decimal("0.003"),
    rama_employer_rate=Decimal("0.075"),
    rama_employee_rate=Decimal("0.075"),
    cbhi_rate=Decimal("0.005"),
)
