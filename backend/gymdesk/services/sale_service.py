"""
Point-of-sale checkout.

Prices come from the catalog, never from the client. Stock is checked and
decremented in the same transaction that stores the sale and its payment.
"""
import logging
import uuid
from collections import defaultdict
from datetime import date

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.dependencies import RequestContext
from gymdesk.core.exceptions import BadRequestError, NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.models.membership import PaymentMethod
from gymdesk.models.payment import Payment, PaymentKind
from gymdesk.models.product import Product
from gymdesk.models.sale import Sale, SaleItem
from gymdesk.rules.pos import CartLine, SaleRejected, compute_sale_totals, to_money
from gymdesk.schemas.sale import SaleCreate
from gymdesk.services.audit_service import log_action
from gymdesk.services.member_service import get_member
from gymdesk.services.payment_service import date_range_filters

logger = logging.getLogger(__name__)


async def create_sale(db: AsyncSession, ctx: RequestContext, data: SaleCreate) -> Sale:
    if data.member_id is not None:
        await get_member(db, data.member_id)

    # Merge repeated products so the stock check sees the full requested quantity
    quantities: dict[uuid.UUID, int] = defaultdict(int)
    for item in data.items:
        quantities[item.product_id] += item.quantity

    result = await db.execute(select(Product).where(Product.id.in_(list(quantities))))
    products = {p.id: p for p in result.scalars().all()}

    lines: list[tuple[Product, CartLine]] = []
    for product_id, quantity in quantities.items():
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise NotFoundError(f"Product {product_id} not found")
        if product.stock < quantity:
            raise BadRequestError(
                f"Insufficient stock for {product.name}: {product.stock} available, {quantity} requested"
            )
        lines.append((product, CartLine(quantity=quantity, unit_price=to_money(product.price))))

    try:
        totals = compute_sale_totals(
            [line for _, line in lines],
            data.payment_method.value,
            data.cash_tendered,
            tax_rate=settings.TAX_RATE,
        )
    except SaleRejected as e:
        raise BadRequestError(str(e))

    sale = Sale(
        member_id=data.member_id,
        subtotal=float(totals.subtotal),
        tax=float(totals.tax),
        total=float(totals.total),
        payment_method=data.payment_method,
        cash_tendered=float(totals.cash_tendered) if totals.cash_tendered is not None else None,
        change=float(totals.change),
        notes=data.notes,
        sold_by=ctx.user_id,
        items=[
            SaleItem(
                product=product,
                product_id=product.id,
                quantity=line.quantity,
                unit_price=float(line.unit_price),
                line_total=float(line.line_total),
            )
            for product, line in lines
        ],
    )
    for product, line in lines:
        product.stock -= line.quantity
    db.add(sale)
    await db.flush()

    db.add(Payment(
        member_id=data.member_id,
        sale_id=sale.id,
        kind=PaymentKind.SALE,
        concept=f"Sale ({sum(line.quantity for _, line in lines)} items)",
        amount=sale.total,
        method=data.payment_method,
        recorded_by=ctx.user_id,
    ))
    await db.flush()

    await log_action(
        db, ctx,
        action=AuditAction.CREATE,
        entity_type=EntityType.SALE,
        entity_id=sale.id,
        detail={
            "total": sale.total,
            "payment_method": sale.payment_method,
            "items": [{"sku": p.sku, "quantity": line.quantity} for p, line in lines],
        },
    )
    logger.info("Sale %s recorded: total %.2f (%s)", sale.id, sale.total, sale.payment_method.value)
    return sale


async def get_sale(db: AsyncSession, sale_id: uuid.UUID) -> Sale:
    result = await db.execute(select(Sale).where(Sale.id == sale_id))
    sale = result.scalar_one_or_none()
    if not sale:
        raise NotFoundError(f"Sale {sale_id} not found")
    return sale


async def list_sales(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    start_date: date | None = None,
    end_date: date | None = None,
    payment_method: PaymentMethod | None = None,
) -> tuple[list[Sale], int, float]:
    filters = date_range_filters(Sale.created_at, start_date, end_date)
    if payment_method is not None:
        filters.append(Sale.payment_method == payment_method)

    count, amount = (await db.execute(
        select(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0.0)).where(*filters)
    )).one()
    result = await db.execute(
        select(Sale).where(*filters).order_by(Sale.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), count or 0, round(float(amount or 0), 2)


async def sales_today(db: AsyncSession) -> dict:
    today = utc_today()
    sales, count, amount = await list_sales(db, limit=1000, start_date=today, end_date=today)
    by_method = {method.value: 0.0 for method in PaymentMethod}
    for sale in sales:
        by_method[sale.payment_method.value] = round(by_method[sale.payment_method.value] + sale.total, 2)
    return {
        "date": today,
        "count": count,
        "total_amount": amount,
        "by_method": by_method,
        "sales": sales,
    }


async def top_products(
    db: AsyncSession,
    limit: int = 10,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict]:
    quantity = func.sum(SaleItem.quantity).label("quantity_sold")
    revenue = func.sum(SaleItem.line_total).label("revenue")
    result = await db.execute(
        select(Product.id, Product.name, Product.sku, quantity, revenue)
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, Sale.id == SaleItem.sale_id)
        .where(*date_range_filters(Sale.created_at, start_date, end_date))
        .group_by(Product.id, Product.name, Product.sku)
        .order_by(desc("quantity_sold"))
        .limit(limit)
    )
    return [
        {
            "product_id": row.id,
            "name": row.name,
            "sku": row.sku,
            "quantity_sold": int(row.quantity_sold or 0),
            "revenue": round(float(row.revenue or 0), 2),
        }
        for row in result.all()
    ]
