import logging
import uuid
from datetime import datetime, time, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import ConflictError, NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.attendance import Attendance
from gymdesk.models.member import Member
from gymdesk.models.membership import Membership
from gymdesk.schemas.member import MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: uuid.UUID | None = None) -> None:
    query = select(Member.id).where(Member.code == code)
    if exclude_id is not None:
        query = query.where(Member.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise ConflictError(f"Member code '{code}' already exists")


async def create_member(db: AsyncSession, data: MemberCreate) -> Member:
    await _ensure_code_free(db, data.code)
    member = Member(**data.model_dump(), is_active=True)
    db.add(member)
    await db.flush()
    await db.refresh(member)
    return member


async def get_member(db: AsyncSession, member_id: uuid.UUID) -> Member:
    result = await db.execute(select(Member).where(Member.id == member_id))
    member = result.scalar_one_or_none()
    if not member:
        raise NotFoundError(f"Member {member_id} not found")
    return member


async def get_member_by_code(db: AsyncSession, code: str) -> Member:
    result = await db.execute(select(Member).where(Member.code == code))
    member = result.scalar_one_or_none()
    if not member:
        raise NotFoundError(f"Member with code '{code}' not found")
    return member


async def list_members(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    is_active: bool | None = True,
) -> tuple[list[Member], int]:
    filters = []
    if is_active is not None:
        filters.append(Member.is_active == is_active)
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            Member.first_name.ilike(pattern),
            Member.last_name.ilike(pattern),
            (Member.first_name + " " + Member.last_name).ilike(pattern),
            Member.code.ilike(pattern),
            Member.email.ilike(pattern),
            Member.phone.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Member.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Member).where(*filters)
        .order_by(Member.last_name, Member.first_name)
        .offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_member(db: AsyncSession, member_id: uuid.UUID, data: MemberUpdate) -> tuple[Member, dict]:
    member = await get_member(db, member_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("code") and update_data["code"] != member.code:
        await _ensure_code_free(db, update_data["code"], exclude_id=member.id)
    for field, value in update_data.items():
        setattr(member, field, value)
    await db.flush()
    await db.refresh(member)
    return member, update_data


async def deactivate_member(db: AsyncSession, member_id: uuid.UUID) -> Member:
    member = await get_member(db, member_id)
    member.is_active = False
    await db.flush()
    return member


async def get_current_membership(db: AsyncSession, member_id: uuid.UUID) -> Membership | None:
    """The member's current membership if it has not expired yet."""
    result = await db.execute(
        select(Membership)
        .where(
            Membership.member_id == member_id,
            Membership.is_active == True,  # noqa: E712
            Membership.expiration_date >= utc_today(),
        )
        .order_by(Membership.expiration_date.desc())
        .limit(1)
    )
    return result.scalars().first()


async def count_recent_attendance(db: AsyncSession, member_id: uuid.UUID, days: int = 30) -> int:
    since = datetime.combine(utc_today() - timedelta(days=days), time.min)
    result = await db.execute(
        select(func.count(Attendance.id)).where(
            Attendance.member_id == member_id, Attendance.checked_in_at >= since
        )
    )
    return result.scalar() or 0


async def member_attendance(
    db: AsyncSession, member_id: uuid.UUID, skip: int = 0, limit: int = 50
) -> tuple[list[Attendance], int]:
    await get_member(db, member_id)
    total = (await db.execute(
        select(func.count(Attendance.id)).where(Attendance.member_id == member_id)
    )).scalar() or 0
    result = await db.execute(
        select(Attendance).where(Attendance.member_id == member_id)
        .order_by(Attendance.checked_in_at.desc())
        .offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def member_memberships(db: AsyncSession, member_id: uuid.UUID) -> list[Membership]:
    await get_member(db, member_id)
    result = await db.execute(
        select(Membership).where(Membership.member_id == member_id)
        .order_by(Membership.start_date.desc(), Membership.created_at.desc())
    )
    return list(result.scalars().all())
