import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.membership import PaymentMethod
from gymdesk.schemas.sale import SaleCreate, SaleListResponse, SaleResponse, TodaySalesResponse, TopProduct
from gymdesk.services import sale_service

router = APIRouter(prefix="/sales", tags=["sales"])

can_sell = require_permission(Permission.POS)
can_view_financials = require_permission(Permission.VIEW_FINANCIALS)


@router.post("", response_model=SaleResponse, status_code=201)
async def create_sale(
    body: SaleCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_sell),
):
    """Ring up a sale: stock is decremented and a payment recorded in the same transaction."""
    return await sale_service.create_sale(db, ctx, body)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    payment_method: PaymentMethod | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    sales, total, amount = await sale_service.list_sales(
        db, skip=skip, limit=limit, start_date=start_date, end_date=end_date, payment_method=payment_method
    )
    return SaleListResponse(sales=sales, total=total, total_amount=amount)


@router.get("/today", response_model=TodaySalesResponse)
async def sales_today(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    return await sale_service.sales_today(db)


@router.get("/top-products", response_model=list[TopProduct])
async def top_products(
    limit: int = Query(10, ge=1, le=50),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    return await sale_service.top_products(db, limit=limit, start_date=start_date, end_date=end_date)


@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_sell),
):
    return await sale_service.get_sale(db, sale_id)
