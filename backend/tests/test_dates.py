from datetime import date
from decimal import Decimal

import pytest

from gymdesk.rules.dates import (
    DurationUnit,
    add_duration,
    add_months,
    days_remaining,
    duration_in_days,
    is_membership_active,
    price_per_day,
    renewal_start,
)


def test_add_days():
    assert add_duration(date(2024, 3, 1), 7, DurationUnit.DAYS) == date(2024, 3, 8)
    assert add_duration(date(2024, 12, 31), 1, "days") == date(2025, 1, 1)


def test_add_month_clamps_to_end_of_february():
    assert add_duration(date(2024, 1, 31), 1, DurationUnit.MONTHS) == date(2024, 2, 29)
    assert add_duration(date(2023, 1, 31), 1, DurationUnit.MONTHS) == date(2023, 2, 28)


def test_add_months_across_year_boundary():
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_duration(date(2024, 8, 31), 6, DurationUnit.MONTHS) == date(2025, 2, 28)


def test_add_year_from_leap_day():
    assert add_duration(date(2024, 2, 29), 1, DurationUnit.YEARS) == date(2025, 2, 28)
    assert add_duration(date(2024, 2, 29), 4, DurationUnit.YEARS) == date(2028, 2, 29)


@pytest.mark.parametrize("amount", [0, -1])
def test_add_duration_rejects_non_positive_amount(amount):
    with pytest.raises(ValueError):
        add_duration(date(2024, 1, 1), amount, DurationUnit.DAYS)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("dias", DurationUnit.DAYS),
        ("Días", DurationUnit.DAYS),
        ("meses", DurationUnit.MONTHS),
        ("mes", DurationUnit.MONTHS),
        ("años", DurationUnit.YEARS),
        ("anos", DurationUnit.YEARS),
        ("months", DurationUnit.MONTHS),
    ],
)
def test_duration_unit_accepts_legacy_names(raw, expected):
    assert DurationUnit(raw) is expected


def test_unknown_duration_unit_raises():
    with pytest.raises(ValueError):
        DurationUnit("fortnights")


def test_duration_in_days_uses_30_day_months():
    assert duration_in_days(7, DurationUnit.DAYS) == 7
    assert duration_in_days(3, DurationUnit.MONTHS) == 90
    assert duration_in_days(1, DurationUnit.YEARS) == 365


def test_price_per_day():
    assert price_per_day(80, 1, DurationUnit.MONTHS) == Decimal("2.67")
    assert price_per_day(600, 1, DurationUnit.YEARS) == Decimal("1.64")
    assert price_per_day(5, 1, DurationUnit.DAYS) == Decimal("5.00")


def test_membership_active_through_expiration_day():
    today = date(2024, 5, 10)
    assert is_membership_active(date(2024, 5, 10), today)
    assert is_membership_active(date(2024, 6, 1), today)
    assert not is_membership_active(date(2024, 5, 9), today)


def test_days_remaining():
    assert days_remaining(date(2024, 5, 15), date(2024, 5, 10)) == 5
    assert days_remaining(date(2024, 5, 8), date(2024, 5, 10)) == -2


def test_renewal_continues_after_running_membership():
    today = date(2024, 5, 10)
    assert renewal_start(date(2024, 5, 20), today) == date(2024, 5, 21)
    assert renewal_start(date(2024, 5, 10), today) == date(2024, 5, 11)


def test_renewal_of_lapsed_membership_starts_today():
    today = date(2024, 5, 10)
    assert renewal_start(date(2024, 5, 1), today) == today
    assert renewal_start(None, today) == today
