import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.attendance import AttendanceListResponse
from gymdesk.schemas.member import (
    MemberAccessResponse,
    MemberCreate,
    MemberDetailResponse,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)
from gymdesk.schemas.membership import MembershipListResponse, MembershipResponse
from gymdesk.services import member_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/members", tags=["members"])

can_view = require_permission(Permission.VIEW_MEMBERS)
can_manage = require_permission(Permission.MANAGE_MEMBERS)


@router.get("", response_model=MemberListResponse)
async def list_members(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    search: str | None = Query(None, max_length=100),
    is_active: bool | None = Query(True),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    members, total = await member_service.list_members(
        db, skip=skip, limit=limit, search=search, is_active=is_active
    )
    return MemberListResponse(members=members, total=total)


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    body: MemberCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    member = await member_service.create_member(db, body)
    await log_action(
        db, ctx, action=AuditAction.CREATE, entity_type=EntityType.MEMBER, entity_id=member.id,
        detail={"code": member.code, "name": member.full_name},
    )
    return member


@router.get("/code/{code}", response_model=MemberAccessResponse)
async def get_member_by_code(
    code: str,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    """Lookup used by the check-in desk: member plus whether they may enter today."""
    member = await member_service.get_member_by_code(db, code)
    membership = await member_service.get_current_membership(db, member.id)
    return MemberAccessResponse(
        **MemberResponse.model_validate(member).model_dump(),
        active_membership=MembershipResponse.model_validate(membership) if membership else None,
        has_access=member.is_active and membership is not None,
    )


@router.get("/{member_id}", response_model=MemberDetailResponse)
async def get_member(
    member_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    member = await member_service.get_member(db, member_id)
    membership = await member_service.get_current_membership(db, member.id)
    return MemberDetailResponse(
        **MemberResponse.model_validate(member).model_dump(),
        active_membership=MembershipResponse.model_validate(membership) if membership else None,
        attendance_last_30_days=await member_service.count_recent_attendance(db, member.id),
    )


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: uuid.UUID,
    body: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    member, changes = await member_service.update_member(db, member_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.MEMBER, entity_id=member.id, detail=changes,
    )
    return member


@router.delete("/{member_id}", status_code=204)
async def delete_member(
    member_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    member = await member_service.deactivate_member(db, member_id)
    await log_action(
        db, ctx, action=AuditAction.DELETE, entity_type=EntityType.MEMBER, entity_id=member.id,
        detail={"code": member.code, "name": member.full_name},
    )


@router.get("/{member_id}/attendance", response_model=AttendanceListResponse)
async def member_attendance(
    member_id: uuid.UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    rows, total = await member_service.member_attendance(db, member_id, skip=skip, limit=limit)
    return AttendanceListResponse(attendance=rows, total=total)


@router.get("/{member_id}/memberships", response_model=MembershipListResponse)
async def member_memberships(
    member_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_view),
):
    memberships = await member_service.member_memberships(db, member_id)
    return MembershipListResponse(memberships=memberships, total=len(memberships))
