import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.schemas.membership import MembershipAssign, MembershipListResponse, MembershipResponse
from gymdesk.services import membership_service

router = APIRouter(prefix="/memberships", tags=["memberships"])

can_renew = require_permission(Permission.RENEW_MEMBERSHIP)
can_view = require_permission(Permission.VIEW_MEMBERS)


@router.post("", response_model=MembershipResponse, status_code=201)
async def assign_membership(
    body: MembershipAssign,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_renew),
):
    """Assign a plan; the new membership starts today unless start_date is given."""
    return await membership_service.assign_membership(db, ctx, body)


@router.post("/renew", response_model=MembershipResponse, status_code=201)
async def renew_membership(
    body: MembershipAssign,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_renew),
):
    """Renew; without start_date the renewal continues the day after the current expiration."""
    return await membership_service.assign_membership(db, ctx, body, renewal=True)


@router.get("/expiring", response_model=MembershipListResponse)
async def expiring_memberships(
    days: int = Query(7, ge=0, le=365),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    memberships = await membership_service.list_expiring(db, days)
    return MembershipListResponse(memberships=memberships, total=len(memberships))


@router.get("/expired", response_model=MembershipListResponse)
async def expired_memberships(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    memberships, total = await membership_service.list_expired(db, skip=skip, limit=limit)
    return MembershipListResponse(memberships=memberships, total=total)


@router.get("/{membership_id}", response_model=MembershipResponse)
async def get_membership(
    membership_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    return await membership_service.get_membership(db, membership_id)
