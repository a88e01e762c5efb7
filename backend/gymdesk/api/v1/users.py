import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.user_mgmt import PasswordReset, UserCreate, UserListResponse, UserOut, UserUpdate
from gymdesk.services import user_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/users", tags=["users"])

require_user_admin = require_permission(Permission.MANAGE_USERS)


@router.get("", response_model=UserListResponse)
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(require_user_admin),
):
    users, total = await user_service.list_users(db, skip=skip, limit=limit, include_inactive=include_inactive)
    return UserListResponse(users=users, total=total)


@router.post("", response_model=UserOut, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_user_admin),
):
    user = await user_service.create_user(db, body)
    await log_action(
        db, ctx, action=AuditAction.CREATE, entity_type=EntityType.USER, entity_id=user.id,
        detail={"username": user.username, "role": user.role.value},
    )
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(require_user_admin),
):
    return await user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_user_admin),
):
    user, changes = await user_service.update_user(db, user_id, body, ctx.user_id)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.USER, entity_id=user.id, detail=changes,
    )
    return user


@router.put("/{user_id}/password", status_code=204)
async def reset_user_password(
    user_id: uuid.UUID,
    body: PasswordReset,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_user_admin),
):
    user = await user_service.set_password(db, user_id, body.new_password)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.USER, entity_id=user.id,
        detail={"field": "password"},
    )


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_user_admin),
):
    user = await user_service.deactivate_user(db, user_id, ctx.user_id)
    await log_action(
        db, ctx, action=AuditAction.DELETE, entity_type=EntityType.USER, entity_id=user.id,
        detail={"username": user.username},
    )
