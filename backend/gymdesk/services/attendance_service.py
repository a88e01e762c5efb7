"""
Attendance check-in and statistics.

A check-in is refused for an unknown member (404), an inactive member (400),
a member without a current membership (403) and a second check-in on the same
day (409).
"""
import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext
from gymdesk.core.exceptions import BadRequestError, ConflictError, ForbiddenError
from gymdesk.db.base import utc_today
from gymdesk.models.attendance import Attendance
from gymdesk.models.membership import Membership
from gymdesk.services.member_service import get_current_membership, get_member, get_member_by_code
from gymdesk.services.payment_service import date_range_filters

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    attendance: Attendance
    membership: Membership


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


async def check_in(
    db: AsyncSession,
    ctx: RequestContext,
    member_id: uuid.UUID | None = None,
    code: str | None = None,
) -> CheckInResult:
    if member_id is not None:
        member = await get_member(db, member_id)
    else:
        member = await get_member_by_code(db, code.strip())

    if not member.is_active:
        raise BadRequestError(f"{member.full_name} is inactive")

    membership = await get_current_membership(db, member.id)
    if membership is None:
        raise ForbiddenError(f"{member.full_name} has no active membership")

    start, end = _day_bounds(utc_today())
    already = await db.execute(
        select(Attendance.id).where(
            Attendance.member_id == member.id,
            Attendance.checked_in_at >= start,
            Attendance.checked_in_at < end,
        ).limit(1)
    )
    if already.scalar_one_or_none():
        raise ConflictError(f"{member.full_name} already checked in today")

    attendance = Attendance(member=member, recorded_by=ctx.user_id)
    db.add(attendance)
    await db.flush()
    logger.info("Check-in: member %s", member.code)
    return CheckInResult(attendance=attendance, membership=membership)


async def list_today(db: AsyncSession) -> list[Attendance]:
    start, end = _day_bounds(utc_today())
    result = await db.execute(
        select(Attendance)
        .where(Attendance.checked_in_at >= start, Attendance.checked_in_at < end)
        .order_by(Attendance.checked_in_at.desc())
    )
    return list(result.scalars().all())


async def list_attendance(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    member_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[Attendance], int]:
    filters = date_range_filters(Attendance.checked_in_at, start_date, end_date)
    if member_id is not None:
        filters.append(Attendance.member_id == member_id)
    total = (await db.execute(select(func.count(Attendance.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Attendance).where(*filters)
        .order_by(Attendance.checked_in_at.desc())
        .offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def attendance_stats(
    db: AsyncSession,
    start_date: date | None = None,
    end_date: date | None = None,
    top: int = 10,
) -> dict:
    """Totals per day, most frequent members and busiest hours; defaults to the last 30 days."""
    end_date = end_date or utc_today()
    start_date = start_date or end_date - timedelta(days=29)
    if start_date > end_date:
        raise BadRequestError("start_date must be on or before end_date")

    result = await db.execute(
        select(Attendance)
        .where(*date_range_filters(Attendance.checked_in_at, start_date, end_date))
        .order_by(Attendance.checked_in_at)
    )
    rows = list(result.scalars().all())

    by_day = Counter(a.checked_in_at.date() for a in rows)
    by_hour = Counter(a.checked_in_at.hour for a in rows)
    by_member = Counter(a.member_id for a in rows)
    members = {a.member_id: a.member for a in rows}

    return {
        "start_date": start_date,
        "end_date": end_date,
        "total": len(rows),
        "by_day": [{"date": day, "count": count} for day, count in sorted(by_day.items())],
        "top_members": [
            {
                "member_id": member_id,
                "member_name": members[member_id].full_name,
                "member_code": members[member_id].code,
                "count": count,
            }
            for member_id, count in by_member.most_common(top)
        ],
        "peak_hours": [
            {"hour": hour, "count": count}
            for hour, count in sorted(by_hour.items(), key=lambda item: (-item[1], item[0]))
        ],
    }
