import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.dependencies import RequestContext, client_ip, get_request_context
from gymdesk.core.middleware import limiter
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MeResponse,
    ProfileUpdate,
    RefreshRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from gymdesk.services import auth_service, user_service
from gymdesk.services.audit_service import log_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await auth_service.authenticate_user(db, body.username, body.password)
    await log_action(
        db, None,
        action=AuditAction.LOGIN,
        entity_type=EntityType.USER,
        entity_id=user.id,
        user=user,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return auth_service.create_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.refresh_access_token(db, body.refresh_token)


@router.get("/me", response_model=MeResponse)
async def me(ctx: RequestContext = Depends(get_request_context)):
    return MeResponse(
        **UserResponse.model_validate(ctx.user).model_dump(),
        permissions=sorted(p.value for p in ctx.permissions),
    )


@router.put("/me", response_model=MeResponse)
async def update_me(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    user, changes = await user_service.update_profile(db, ctx.user, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.USER, entity_id=user.id, detail=changes,
    )
    return MeResponse(
        **UserResponse.model_validate(user).model_dump(),
        permissions=sorted(p.value for p in ctx.permissions),
    )


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    await auth_service.change_password(db, ctx.user, body.current_password, body.new_password)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.USER,
        entity_id=ctx.user_id, detail={"field": "password"},
    )
    return {"message": "Password changed successfully"}


@router.post("/forgot-password", status_code=202)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def forgot_password(request: Request, body: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    """Email a 6-digit reset code. The response does not reveal whether the email exists."""
    await auth_service.request_password_reset(db, body.email)
    return {"message": "If the email belongs to an account, a reset code has been sent"}


@router.post("/reset-password")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def reset_password(request: Request, body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    await auth_service.reset_password(db, body.email, body.code, body.new_password)
    return {"message": "Password reset successfully"}
