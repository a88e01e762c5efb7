"""
Membership assignment and renewal.

Assigning a plan supersedes every earlier membership of the member, records the
payment and computes the expiration date from the plan's duration.
"""
import logging
import uuid
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext
from gymdesk.core.exceptions import BadRequestError, NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.models.member import Member
from gymdesk.models.membership import Membership
from gymdesk.models.payment import Payment, PaymentKind
from gymdesk.rules.dates import add_duration, renewal_start
from gymdesk.rules.pos import to_money
from gymdesk.schemas.membership import MembershipAssign
from gymdesk.services.audit_service import log_action
from gymdesk.services.member_service import get_member
from gymdesk.services.plan_service import get_plan

logger = logging.getLogger(__name__)


async def _latest_membership(db: AsyncSession, member_id: uuid.UUID) -> Membership | None:
    result = await db.execute(
        select(Membership)
        .where(Membership.member_id == member_id, Membership.is_active == True)  # noqa: E712
        .order_by(Membership.expiration_date.desc())
        .limit(1)
    )
    return result.scalars().first()


async def assign_membership(
    db: AsyncSession,
    ctx: RequestContext,
    data: MembershipAssign,
    renewal: bool = False,
) -> Membership:
    member = await get_member(db, data.member_id)
    if not member.is_active:
        raise BadRequestError("Member is inactive")
    plan = await get_plan(db, data.plan_id)
    if not plan.is_active:
        raise BadRequestError("Plan is not active")

    today = utc_today()
    previous = await _latest_membership(db, member.id)
    if data.start_date is not None:
        start = data.start_date
    elif renewal:
        start = renewal_start(previous.expiration_date if previous else None, today)
    else:
        start = today
    expiration = add_duration(start, plan.duration, plan.duration_unit)
    amount = float(to_money(data.amount_paid if data.amount_paid is not None else plan.price))

    superseded = await db.execute(
        select(Membership).where(Membership.member_id == member.id, Membership.is_active == True)  # noqa: E712
    )
    for old in superseded.scalars().all():
        old.is_active = False

    membership = Membership(
        member=member,
        plan=plan,
        start_date=start,
        expiration_date=expiration,
        amount_paid=amount,
        payment_method=data.payment_method,
        notes=data.notes,
        is_active=True,
        registered_by=ctx.user_id,
    )
    db.add(membership)
    await db.flush()

    db.add(Payment(
        member_id=member.id,
        membership_id=membership.id,
        kind=PaymentKind.MEMBERSHIP,
        concept=f"{'Renewal' if renewal else 'Membership'}: {plan.name}",
        amount=amount,
        method=data.payment_method,
        recorded_by=ctx.user_id,
    ))
    await db.flush()

    await log_action(
        db, ctx,
        action=AuditAction.CREATE,
        entity_type=EntityType.MEMBERSHIP,
        entity_id=membership.id,
        detail={
            "member": member.code,
            "plan": plan.name,
            "start_date": start,
            "expiration_date": expiration,
            "amount_paid": amount,
            "renewal": renewal,
        },
    )
    logger.info(
        "Membership %s assigned to member %s (%s to %s)",
        plan.name, member.code, start.isoformat(), expiration.isoformat(),
    )
    return membership


async def get_membership(db: AsyncSession, membership_id: uuid.UUID) -> Membership:
    result = await db.execute(select(Membership).where(Membership.id == membership_id))
    membership = result.unique().scalar_one_or_none()
    if not membership:
        raise NotFoundError(f"Membership {membership_id} not found")
    return membership


async def list_expiring(db: AsyncSession, days: int = 7) -> list[Membership]:
    """Current memberships of active members expiring between today and today + days."""
    today = utc_today()
    result = await db.execute(
        select(Membership)
        .join(Member, Member.id == Membership.member_id)
        .where(
            Member.is_active == True,  # noqa: E712
            Membership.is_active == True,  # noqa: E712
            Membership.expiration_date >= today,
            Membership.expiration_date <= today + timedelta(days=days),
        )
        .order_by(Membership.expiration_date)
    )
    return list(result.unique().scalars().all())


async def list_expired(db: AsyncSession, skip: int = 0, limit: int = 100) -> tuple[list[Membership], int]:
    """Current memberships of active members whose expiration date has passed."""
    today = utc_today()
    filters = (
        Member.is_active == True,  # noqa: E712
        Membership.is_active == True,  # noqa: E712
        Membership.expiration_date < today,
    )
    total = (await db.execute(
        select(func.count(Membership.id)).join(Member, Member.id == Membership.member_id).where(*filters)
    )).scalar() or 0
    result = await db.execute(
        select(Membership)
        .join(Member, Member.id == Membership.member_id)
        .where(*filters)
        .order_by(Membership.expiration_date.desc())
        .offset(skip).limit(limit)
    )
    return list(result.unique().scalars().all()), total
