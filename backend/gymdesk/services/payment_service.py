import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext
from gymdesk.core.exceptions import NotFoundError
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.models.payment import Payment
from gymdesk.rules.pos import to_money
from gymdesk.schemas.payment import PaymentCreate
from gymdesk.services.audit_service import log_action
from gymdesk.services.member_service import get_member


def date_range_filters(column, start_date: date | None, end_date: date | None) -> list:
    """Inclusive calendar-day bounds on a UTC timestamp column."""
    filters = []
    if start_date:
        filters.append(column >= datetime.combine(start_date, time.min))
    if end_date:
        filters.append(column < datetime.combine(end_date + timedelta(days=1), time.min))
    return filters


async def record_payment(db: AsyncSession, ctx: RequestContext, data: PaymentCreate) -> Payment:
    if data.member_id is not None:
        await get_member(db, data.member_id)
    payment = Payment(
        member_id=data.member_id,
        kind=data.kind,
        concept=data.concept,
        amount=float(to_money(data.amount)),
        method=data.method,
        recorded_by=ctx.user_id,
    )
    db.add(payment)
    await db.flush()
    await db.refresh(payment)
    await log_action(
        db, ctx,
        action=AuditAction.CREATE,
        entity_type=EntityType.PAYMENT,
        entity_id=payment.id,
        detail={"concept": payment.concept, "amount": payment.amount, "method": payment.method},
    )
    return payment


async def get_payment(db: AsyncSession, payment_id: uuid.UUID) -> Payment:
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFoundError(f"Payment {payment_id} not found")
    return payment


async def list_payments(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    member_id: uuid.UUID | None = None,
    kind: str | None = None,
    method: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[Payment], int, float]:
    """Returns (payments, total count, sum of amounts) for the filtered range."""
    filters = date_range_filters(Payment.created_at, start_date, end_date)
    if member_id is not None:
        filters.append(Payment.member_id == member_id)
    if kind:
        filters.append(Payment.kind == kind)
    if method:
        filters.append(Payment.method == method)

    count, amount = (await db.execute(
        select(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0.0)).where(*filters)
    )).one()
    result = await db.execute(
        select(Payment).where(*filters).order_by(Payment.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), count or 0, round(float(amount or 0), 2)
