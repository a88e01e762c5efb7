import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockAdjustment,
)
from gymdesk.services import product_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/products", tags=["products"])

can_sell = require_permission(Permission.POS)
can_manage = require_permission(Permission.MANAGE_INVENTORY)


@router.get("", response_model=ProductListResponse)
async def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    search: str | None = Query(None, max_length=100),
    category: str | None = Query(None),
    is_active: bool | None = Query(True),
    low_stock: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    products, total = await product_service.list_products(
        db, skip=skip, limit=limit, search=search, category=category,
        is_active=is_active, low_stock=low_stock,
    )
    return ProductListResponse(products=products, total=total)


@router.get("/low-stock", response_model=ProductListResponse)
async def low_stock_products(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    products = await product_service.list_low_stock(db)
    return ProductListResponse(products=products, total=len(products))


@router.get("/expiring", response_model=ProductListResponse)
async def expiring_products(
    days: int = Query(15, ge=0, le=365),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    products = await product_service.list_expiring(db, days)
    return ProductListResponse(products=products, total=len(products))


@router.get("/categories", response_model=list[str])
async def product_categories(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    return await product_service.list_categories(db)


@router.get("/code/{sku}", response_model=ProductResponse)
async def get_product_by_sku(
    sku: str,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    return await product_service.get_product_by_sku(db, sku)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    product = await product_service.create_product(db, body)
    await log_action(
        db, ctx, action=AuditAction.CREATE, entity_type=EntityType.PRODUCT, entity_id=product.id,
        detail={"sku": product.sku, "name": product.name, "stock": product.stock},
    )
    return product


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    return await product_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    product, changes = await product_service.update_product(db, product_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.PRODUCT, entity_id=product.id, detail=changes,
    )
    return product


@router.patch("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(
    product_id: uuid.UUID,
    body: StockAdjustment,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    product = await product_service.adjust_stock(db, product_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.PRODUCT, entity_id=product.id,
        detail={"operation": body.operation.value, "quantity": body.quantity, "stock": product.stock},
    )
    return product


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    product = await product_service.deactivate_product(db, product_id)
    await log_action(
        db, ctx, action=AuditAction.DELETE, entity_type=EntityType.PRODUCT, entity_id=product.id,
        detail={"sku": product.sku, "name": product.name},
    )
