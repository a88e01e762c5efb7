from decimal import Decimal

import pytest

from gymdesk.rules.pos import CartLine, SaleRejected, compute_sale_totals, to_money


def _line(quantity, price):
    return CartLine(quantity=quantity, unit_price=Decimal(price))


def test_card_sale_totals():
    totals = compute_sale_totals([_line(2, "10.00"), _line(1, "25.50")], "card")
    assert totals.subtotal == Decimal("45.50")
    assert totals.total == Decimal("52.78")
    assert totals.tax == Decimal("7.28")
    assert totals.change == Decimal("0.00")
    assert totals.cash_tendered is None


def test_tax_and_subtotal_add_up_to_total():
    totals = compute_sale_totals([_line(3, "0.35")], "transfer")
    assert totals.subtotal + totals.tax == totals.total


def test_total_rounds_half_up():
    # 0.05 * 1.16 = 0.058
    assert compute_sale_totals([_line(1, "0.05")], "card").total == Decimal("0.06")


def test_cash_sale_returns_change():
    totals = compute_sale_totals([_line(1, "50.00")], "cash", cash_tendered=100)
    assert totals.total == Decimal("58.00")
    assert totals.cash_tendered == Decimal("100.00")
    assert totals.change == Decimal("42.00")


def test_cash_exact_amount_has_no_change():
    totals = compute_sale_totals([_line(1, "50.00")], "cash", cash_tendered="58.00")
    assert totals.change == Decimal("0.00")


def test_cash_below_total_is_rejected():
    with pytest.raises(SaleRejected, match="Insufficient cash"):
        compute_sale_totals([_line(1, "50.00")], "cash", cash_tendered=57.99)


def test_cash_without_tendered_is_rejected():
    with pytest.raises(SaleRejected):
        compute_sale_totals([_line(1, "50.00")], "cash")


def test_non_cash_ignores_tendered():
    totals = compute_sale_totals([_line(1, "50.00")], "card", cash_tendered=10)
    assert totals.cash_tendered is None
    assert totals.change == Decimal("0.00")


def test_empty_cart_is_rejected():
    with pytest.raises(SaleRejected, match="empty"):
        compute_sale_totals([], "card")


def test_non_positive_quantity_is_rejected():
    with pytest.raises(SaleRejected):
        compute_sale_totals([_line(0, "10.00")], "card")


def test_custom_tax_rate():
    totals = compute_sale_totals([_line(1, "100.00")], "card", tax_rate=0)
    assert totals.total == Decimal("100.00")
    assert totals.tax == Decimal("0.00")


def test_to_money():
    assert to_money(1.005) == Decimal("1.01")
    assert to_money("2") == Decimal("2.00")
