"""Dashboard counters and revenue reports."""
import enum
from collections import defaultdict
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.exceptions import BadRequestError
from gymdesk.db.base import utc_today
from gymdesk.models.attendance import Attendance
from gymdesk.models.member import Member
from gymdesk.models.membership import Membership
from gymdesk.models.payment import Payment
from gymdesk.models.sale import Sale
from gymdesk.services import alert_service, machine_service, membership_service, product_service, setting_service
from gymdesk.services.payment_service import date_range_filters


class RevenueGrouping(str, enum.Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


def period_label(day: date, group_by: RevenueGrouping) -> str:
    match group_by:
        case RevenueGrouping.DAY:
            return day.isoformat()
        case RevenueGrouping.MONTH:
            return f"{day.year:04d}-{day.month:02d}"
        case RevenueGrouping.YEAR:
            return f"{day.year:04d}"


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar() or 0


async def summary(db: AsyncSession) -> dict:
    today = utc_today()
    month_start = today.replace(day=1)

    sales_count, sales_revenue = (await db.execute(
        select(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0.0))
        .where(*date_range_filters(Sale.created_at, today, today))
    )).one()
    month_revenue = (await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0.0))
        .where(*date_range_filters(Payment.created_at, month_start, today))
    )).scalar()

    return {
        "date": today,
        "active_members": await _count(
            db, select(func.count(Member.id)).where(Member.is_active == True)  # noqa: E712
        ),
        "members_with_active_membership": await _count(
            db,
            select(func.count(func.distinct(Membership.member_id)))
            .join(Member, Member.id == Membership.member_id)
            .where(
                Member.is_active == True,  # noqa: E712
                Membership.is_active == True,  # noqa: E712
                Membership.expiration_date >= today,
            ),
        ),
        "attendance_today": await _count(
            db,
            select(func.count(Attendance.id))
            .where(*date_range_filters(Attendance.checked_in_at, today, today)),
        ),
        "sales_today": sales_count or 0,
        "sales_revenue_today": round(float(sales_revenue or 0), 2),
        "revenue_this_month": round(float(month_revenue or 0), 2),
        "memberships_expiring_soon": len(
            await membership_service.list_expiring(
                db, await setting_service.get_int(db, "membership_alert_days", settings.MEMBERSHIP_ALERT_DAYS)
            )
        ),
        "low_stock_products": len(await product_service.list_low_stock(db)),
        "machines_maintenance_due": len(
            await machine_service.list_maintenance_due(db, settings.MAINTENANCE_ALERT_DAYS)
        ),
        "unread_alerts": await alert_service.get_unread_count(db),
    }


async def revenue_report(
    db: AsyncSession,
    start_date: date | None = None,
    end_date: date | None = None,
    group_by: RevenueGrouping = RevenueGrouping.DAY,
) -> dict:
    """Payments grouped by period, by kind and by method; defaults to the last 30 days."""
    end_date = end_date or utc_today()
    start_date = start_date or end_date - timedelta(days=29)
    if start_date > end_date:
        raise BadRequestError("start_date must be on or before end_date")

    result = await db.execute(
        select(Payment)
        .where(*date_range_filters(Payment.created_at, start_date, end_date))
        .order_by(Payment.created_at)
    )
    payments = list(result.scalars().all())

    series: dict[str, dict] = {}
    by_kind: dict[str, float] = defaultdict(float)
    by_method: dict[str, float] = defaultdict(float)
    for payment in payments:
        label = period_label(payment.created_at.date(), group_by)
        point = series.setdefault(label, {"period": label, "total": 0.0, "count": 0})
        point["total"] += payment.amount
        point["count"] += 1
        by_kind[payment.kind.value] += payment.amount
        by_method[payment.method.value] += payment.amount

    for point in series.values():
        point["total"] = round(point["total"], 2)

    return {
        "start_date": start_date,
        "end_date": end_date,
        "group_by": group_by.value,
        "total": round(sum(p.amount for p in payments), 2),
        "series": list(series.values()),
        "by_kind": {k: round(v, 2) for k, v in by_kind.items()},
        "by_method": {k: round(v, 2) for k, v in by_method.items()},
    }
