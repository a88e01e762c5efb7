from datetime import date

from gymdesk.rules.thresholds import is_expiring, is_low_stock, is_maintenance_due, next_maintenance_date

TODAY = date(2024, 6, 15)


def test_next_maintenance_date():
    assert next_maintenance_date(date(2024, 1, 1), 90) == date(2024, 3, 31)
    assert next_maintenance_date(None, 90) is None


def test_maintenance_due_on_or_before_today():
    assert is_maintenance_due(date(2024, 6, 15), TODAY)
    assert is_maintenance_due(date(2024, 6, 1), TODAY)
    assert not is_maintenance_due(date(2024, 6, 16), TODAY)
    assert not is_maintenance_due(None, TODAY)


def test_maintenance_due_within_window():
    assert is_maintenance_due(date(2024, 6, 22), TODAY, window_days=7)
    assert not is_maintenance_due(date(2024, 6, 23), TODAY, window_days=7)


def test_low_stock_includes_minimum():
    assert is_low_stock(5, 5)
    assert is_low_stock(0, 5)
    assert not is_low_stock(6, 5)


def test_expiring_includes_already_expired():
    assert is_expiring(date(2024, 6, 1), TODAY, 15)
    assert is_expiring(date(2024, 6, 30), TODAY, 15)
    assert not is_expiring(date(2024, 7, 1), TODAY, 15)
    assert not is_expiring(None, TODAY, 15)
