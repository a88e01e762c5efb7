"""Stock, expiration and maintenance thresholds used by lists and alerts."""
from datetime import date, timedelta


def next_maintenance_date(last: date | None, interval_days: int) -> date | None:
    if last is None or interval_days <= 0:
        return None
    return last + timedelta(days=interval_days)


def is_maintenance_due(next_date: date | None, today: date, window_days: int = 0) -> bool:
    if next_date is None:
        return False
    return next_date <= today + timedelta(days=window_days)


def is_low_stock(stock: int, minimum: int) -> bool:
    return stock <= minimum


def is_expiring(expiration: date | None, today: date, window_days: int) -> bool:
    """True for products expiring within the window, including ones already expired."""
    if expiration is None:
        return False
    return expiration <= today + timedelta(days=window_days)
