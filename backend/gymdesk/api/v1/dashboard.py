from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.exceptions import BadRequestError
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.schemas.dashboard import DashboardSummary, RevenueReport
from gymdesk.services import dashboard_service
from gymdesk.services.dashboard_service import RevenueGrouping

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

can_view_financials = require_permission(Permission.VIEW_FINANCIALS)


@router.get("", response_model=DashboardSummary)
async def dashboard_summary(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    return await dashboard_service.summary(db)


@router.get("/revenue", response_model=RevenueReport)
async def revenue_report(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    group_by: RevenueGrouping = Query(RevenueGrouping.DAY),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view_financials),
):
    if start_date and end_date and start_date > end_date:
        raise BadRequestError("start_date must be on or before end_date")
    return await dashboard_service.revenue_report(db, start_date=start_date, end_date=end_date, group_by=group_by)
