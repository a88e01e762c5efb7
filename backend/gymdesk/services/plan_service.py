import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.membership import Membership
from gymdesk.models.plan import MembershipPlan
from gymdesk.schemas.plan import PlanCreate, PlanUpdate


async def create_plan(db: AsyncSession, data: PlanCreate) -> MembershipPlan:
    plan = MembershipPlan(**data.model_dump())
    db.add(plan)
    await db.flush()
    await db.refresh(plan)
    return plan


async def get_plan(db: AsyncSession, plan_id: uuid.UUID) -> MembershipPlan:
    result = await db.execute(select(MembershipPlan).where(MembershipPlan.id == plan_id))
    plan = result.scalar_one_or_none()
    if not plan:
        raise NotFoundError(f"Plan {plan_id} not found")
    return plan


async def list_plans(
    db: AsyncSession, skip: int = 0, limit: int = 100, active_only: bool = True
) -> tuple[list[MembershipPlan], int]:
    query = select(MembershipPlan)
    count_query = select(func.count(MembershipPlan.id))
    if active_only:
        query = query.where(MembershipPlan.is_active == True)  # noqa: E712
        count_query = count_query.where(MembershipPlan.is_active == True)  # noqa: E712

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(query.order_by(MembershipPlan.price).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def count_active_members(db: AsyncSession, plan_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(func.distinct(Membership.member_id))).where(
            Membership.plan_id == plan_id,
            Membership.is_active == True,  # noqa: E712
            Membership.expiration_date >= utc_today(),
        )
    )
    return result.scalar() or 0


async def update_plan(db: AsyncSession, plan_id: uuid.UUID, data: PlanUpdate) -> tuple[MembershipPlan, dict]:
    plan = await get_plan(db, plan_id)
    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(plan, field, value)
    await db.flush()
    await db.refresh(plan)
    return plan, update_data


async def deactivate_plan(db: AsyncSession, plan_id: uuid.UUID) -> MembershipPlan:
    plan = await get_plan(db, plan_id)
    plan.is_active = False
    await db.flush()
    return plan
