"""
Calendar arithmetic for membership plans.

Month and year offsets clamp the day to the last day of the target month,
so 2024-01-31 + 1 month is 2024-02-29 and 2024-02-29 + 1 year is 2025-02-28.
"""
import calendar
import enum
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

# Approximate lengths used only for price-per-day comparisons
_DAYS_PER_MONTH = 30
_DAYS_PER_YEAR = 365


class DurationUnit(str, enum.Enum):
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return _ALIASES.get(value.strip().lower())
        return None


_ALIASES = {
    "day": DurationUnit.DAYS,
    "dia": DurationUnit.DAYS,
    "días": DurationUnit.DAYS,
    "dias": DurationUnit.DAYS,
    "month": DurationUnit.MONTHS,
    "mes": DurationUnit.MONTHS,
    "meses": DurationUnit.MONTHS,
    "year": DurationUnit.YEARS,
    "año": DurationUnit.YEARS,
    "años": DurationUnit.YEARS,
    "ano": DurationUnit.YEARS,
    "anos": DurationUnit.YEARS,
}


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def add_duration(start: date, amount: int, unit: DurationUnit | str) -> date:
    """Return ``start`` shifted forward by ``amount`` days, months or years."""
    if amount <= 0:
        raise ValueError("Duration must be greater than zero")
    unit = DurationUnit(unit)
    match unit:
        case DurationUnit.DAYS:
            return start + timedelta(days=amount)
        case DurationUnit.MONTHS:
            return add_months(start, amount)
        case DurationUnit.YEARS:
            return add_months(start, amount * 12)


def duration_in_days(amount: int, unit: DurationUnit | str) -> int:
    unit = DurationUnit(unit)
    match unit:
        case DurationUnit.DAYS:
            return amount
        case DurationUnit.MONTHS:
            return amount * _DAYS_PER_MONTH
        case DurationUnit.YEARS:
            return amount * _DAYS_PER_YEAR


def price_per_day(price: float | Decimal, amount: int, unit: DurationUnit | str) -> Decimal:
    days = duration_in_days(amount, unit)
    if days <= 0:
        return Decimal("0.00")
    return (Decimal(str(price)) / days).quantize(CENT, rounding=ROUND_HALF_UP)


def is_membership_active(expiration: date, today: date) -> bool:
    return expiration >= today


def days_remaining(expiration: date, today: date) -> int:
    return (expiration - today).days


def renewal_start(current_expiration: date | None, today: date) -> date:
    """A renewal continues the day after a still-running membership, otherwise starts today."""
    if current_expiration is not None and is_membership_active(current_expiration, today):
        return current_expiration + timedelta(days=1)
    return today
