import logging
import uuid
from datetime import timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import BadRequestError, ConflictError, NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.product import Product
from gymdesk.schemas.product import ProductCreate, ProductUpdate, StockAdjustment, StockOperation

logger = logging.getLogger(__name__)


def _low_stock_clause():
    """SQL form of rules.thresholds.is_low_stock."""
    return Product.stock <= Product.min_stock


async def _ensure_sku_free(db: AsyncSession, sku: str, exclude_id: uuid.UUID | None = None) -> None:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise ConflictError(f"Product code '{sku}' already exists")


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    await _ensure_sku_free(db, data.sku)
    product = Product(**data.model_dump(), is_active=True)
    db.add(product)
    await db.flush()
    await db.refresh(product)
    return product


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


async def get_product_by_sku(db: AsyncSession, sku: str) -> Product:
    result = await db.execute(select(Product).where(Product.sku == sku))
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError(f"Product with code '{sku}' not found")
    return product


async def list_products(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    category: str | None = None,
    is_active: bool | None = True,
    low_stock: bool = False,
) -> tuple[list[Product], int]:
    filters = []
    if is_active is not None:
        filters.append(Product.is_active == is_active)
    if category:
        filters.append(Product.category == category)
    if low_stock:
        filters.append(_low_stock_clause())
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            Product.name.ilike(pattern),
            Product.sku.ilike(pattern),
            Product.description.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Product.id)).where(*filters))).scalar() or 0
    result = await db.execute(select(Product).where(*filters).order_by(Product.name).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def update_product(db: AsyncSession, product_id: uuid.UUID, data: ProductUpdate) -> tuple[Product, dict]:
    product = await get_product(db, product_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("sku") and update_data["sku"] != product.sku:
        await _ensure_sku_free(db, update_data["sku"], exclude_id=product.id)
    for field, value in update_data.items():
        setattr(product, field, value)
    await db.flush()
    await db.refresh(product)
    return product, update_data


async def deactivate_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await get_product(db, product_id)
    product.is_active = False
    await db.flush()
    return product


async def adjust_stock(db: AsyncSession, product_id: uuid.UUID, data: StockAdjustment) -> Product:
    product = await get_product(db, product_id)
    if data.operation == StockOperation.SUBTRACT:
        if product.stock < data.quantity:
            raise BadRequestError(
                f"Insufficient stock for {product.name}: {product.stock} available, {data.quantity} requested"
            )
        product.stock -= data.quantity
    else:
        product.stock += data.quantity
    await db.flush()
    await db.refresh(product)
    logger.info("Stock %s %d for %s, now %d", data.operation.value, data.quantity, product.sku, product.stock)
    return product


async def list_low_stock(db: AsyncSession) -> list[Product]:
    result = await db.execute(
        select(Product)
        .where(Product.is_active == True, _low_stock_clause())  # noqa: E712
        .order_by(Product.stock, Product.name)
    )
    return list(result.scalars().all())


async def list_expiring(db: AsyncSession, days: int = 15) -> list[Product]:
    """Active products with an expiration date within the window, already-expired ones included."""
    limit_date = utc_today() + timedelta(days=days)
    result = await db.execute(
        select(Product)
        .where(
            Product.is_active == True,  # noqa: E712
            Product.expiration_date.is_not(None),
            Product.expiration_date <= limit_date,  # is_expiring
        )
        .order_by(Product.expiration_date)
    )
    return list(result.scalars().all())


async def list_categories(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(Product.category)
        .where(Product.category.is_not(None), Product.category != "")
        .distinct()
        .order_by(Product.category)
    )
    return list(result.scalars().all())
