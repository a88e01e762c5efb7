import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.membership import PaymentMethod
from gymdesk.models.payment import PaymentKind
from gymdesk.schemas.payment import PaymentCreate, PaymentListResponse, PaymentResponse
from gymdesk.services import payment_service

router = APIRouter(prefix="/payments", tags=["payments"])

can_view_financials = require_permission(Permission.VIEW_FINANCIALS)


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    member_id: uuid.UUID | None = Query(None),
    kind: PaymentKind | None = Query(None),
    method: PaymentMethod | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    payments, total, amount = await payment_service.list_payments(
        db, skip=skip, limit=limit, member_id=member_id, kind=kind,
        method=method, start_date=start_date, end_date=end_date,
    )
    return PaymentListResponse(payments=payments, total=total, total_amount=amount)


@router.post("", response_model=PaymentResponse, status_code=201)
async def record_payment(
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_permission(Permission.RENEW_MEMBERSHIP)),
):
    return await payment_service.record_payment(db, ctx, body)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    return await payment_service.get_payment(db, payment_id)
