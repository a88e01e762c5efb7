"""Point-of-sale totals: 16% tax on the cart, change computed for cash payments."""
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("0.16")


class SaleRejected(ValueError):
    """Raised when a cart cannot be charged as submitted."""


@dataclass(frozen=True)
class CartLine:
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    cash_tendered: Decimal | None
    change: Decimal


def to_money(value: float | int | str | Decimal) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_sale_totals(
    lines: Iterable[CartLine],
    payment_method: str,
    cash_tendered: float | Decimal | None = None,
    tax_rate: float | Decimal = DEFAULT_TAX_RATE,
) -> SaleTotals:
    lines = list(lines)
    if not lines:
        raise SaleRejected("Cart is empty")
    for line in lines:
        if line.quantity <= 0:
            raise SaleRejected("Quantity must be greater than zero")

    rate = Decimal(str(tax_rate))
    subtotal = sum((line.line_total for line in lines), Decimal("0")).quantize(CENT)
    total = (subtotal * (1 + rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    tax = total - subtotal

    if payment_method != "cash":
        return SaleTotals(subtotal=subtotal, tax=tax, total=total, cash_tendered=None, change=Decimal("0.00"))

    if cash_tendered is None:
        raise SaleRejected("Cash tendered is required for cash payments")
    tendered = to_money(cash_tendered)
    if tendered < total:
        raise SaleRejected(f"Insufficient cash: total is {total}, received {tendered}")
    return SaleTotals(
        subtotal=subtotal,
        tax=tax,
        total=total,
        cash_tendered=tendered,
        change=tendered - total,
    )
