from datetime import date

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    date: date
    active_members: int
    members_with_active_membership: int
    attendance_today: int
    sales_today: int
    sales_revenue_today: float
    revenue_this_month: float
    memberships_expiring_soon: int
    low_stock_products: int
    machines_maintenance_due: int
    unread_alerts: int


class RevenuePoint(BaseModel):
    period: str
    total: float
    count: int


class RevenueReport(BaseModel):
    start_date: date
    end_date: date
    group_by: str
    total: float
    series: list[RevenuePoint]
    by_kind: dict[str, float]
    by_method: dict[str, float]
