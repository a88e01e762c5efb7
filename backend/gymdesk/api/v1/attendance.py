import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.schemas.attendance import (
    AttendanceListResponse,
    AttendanceResponse,
    AttendanceStats,
    CheckInRequest,
    CheckInResponse,
)
from gymdesk.services import attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"])

can_check_in = require_permission(Permission.CHECK_IN)
can_view = require_permission(Permission.VIEW_MEMBERS)


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    member_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    rows, total = await attendance_service.list_attendance(
        db, skip=skip, limit=limit, member_id=member_id, start_date=start_date, end_date=end_date
    )
    return AttendanceListResponse(attendance=rows, total=total)


@router.post("/check-in", response_model=CheckInResponse, status_code=201)
async def check_in(
    body: CheckInRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_check_in),
):
    """Register a visit. Inactive members get 400, no active membership 403, a second visit today 409."""
    result = await attendance_service.check_in(db, ctx, member_id=body.member_id, code=body.code)
    membership = result.membership
    return CheckInResponse(
        **AttendanceResponse.model_validate(result.attendance).model_dump(),
        plan_name=membership.plan_name,
        expiration_date=membership.expiration_date,
        days_remaining=membership.days_remaining,
    )


@router.get("/today", response_model=AttendanceListResponse)
async def attendance_today(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_check_in),
):
    rows = await attendance_service.list_today(db)
    return AttendanceListResponse(attendance=rows, total=len(rows))


@router.get("/stats", response_model=AttendanceStats)
async def attendance_stats(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    top: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    return await attendance_service.attendance_stats(db, start_date=start_date, end_date=end_date, top=top)
