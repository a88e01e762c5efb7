from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, get_request_context, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.setting import SettingResponse, SettingUpdate
from gymdesk.services import setting_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=list[SettingResponse])
async def list_settings(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return await setting_service.list_settings(db)


@router.get("/{key}", response_model=SettingResponse)
async def get_setting(
    key: str,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return await setting_service.get_setting(db, key)


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    body: SettingUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_permission(Permission.CONFIGURE_SYSTEM)),
):
    setting = await setting_service.upsert_setting(db, key, body.value, body.description)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.SETTING, entity_id=setting.id,
        detail={"key": key, "value": body.value},
    )
    return setting
