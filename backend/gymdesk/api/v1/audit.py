import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.schemas.user_mgmt import AuditLogListResponse
from gymdesk.services.audit_service import list_audit_logs

router = APIRouter(prefix="/audit-log", tags=["audit"])


@router.get("", response_model=AuditLogListResponse)
async def list_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    user_id: uuid.UUID | None = Query(None),
    action: str | None = Query(None),
    entity_type: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(require_permission(Permission.MANAGE_USERS)),
):
    """Admin: persistent audit log of logins and write actions."""
    logs, total = await list_audit_logs(
        db, skip=skip, limit=limit, user_id=user_id, action=action,
        entity_type=entity_type, start_date=start_date, end_date=end_date,
    )
    return AuditLogListResponse(logs=logs, total=total)
