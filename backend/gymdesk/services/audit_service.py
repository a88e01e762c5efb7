"""Audit logging service. Records staff write actions and logins."""
import logging
import uuid
from datetime import date, datetime, time, timedelta

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext
from gymdesk.models.audit_log import AuditAction, AuditLog, EntityType
from gymdesk.models.user import User

logger = logging.getLogger(__name__)


async def log_action(
    db: AsyncSession,
    ctx: RequestContext | None,
    *,
    action: AuditAction | str,
    entity_type: EntityType | str,
    entity_id=None,
    detail: dict | None = None,
    user: User | None = None,
    ip_address: str | None = None,
    request_id: str | None = None,
) -> None:
    """Write an audit log entry in a savepoint. Logs and carries on if the write fails."""
    actor = ctx.user if ctx else user
    entry = AuditLog(
        user_id=actor.id if actor else None,
        username=actor.username if actor else None,
        action=AuditAction(action).value,
        entity_type=EntityType(entity_type).value,
        entity_id=str(entity_id) if entity_id else None,
        detail=jsonable_encoder(detail) if detail else None,
        ip_address=ctx.ip_address if ctx else ip_address,
        request_id=ctx.request_id if ctx else request_id,
    )
    try:
        async with db.begin_nested():
            db.add(entry)
    except SQLAlchemyError as e:
        logger.warning("Audit log write failed: %s", e)


async def list_audit_logs(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    user_id: uuid.UUID | None = None,
    action: str | None = None,
    entity_type: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[AuditLog], int]:
    filters = []
    if user_id is not None:
        filters.append(AuditLog.user_id == user_id)
    if action:
        filters.append(AuditLog.action == action.lower())
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type.lower())
    if start_date:
        filters.append(AuditLog.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        filters.append(AuditLog.created_at < datetime.combine(end_date + timedelta(days=1), time.min))

    total = (await db.execute(select(func.count(AuditLog.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(AuditLog).where(*filters).order_by(AuditLog.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total
