import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, get_request_context
from gymdesk.db.session import get_db
from gymdesk.models.alert import AlertSeverity, AlertType
from gymdesk.schemas.alert import AlertCreate, AlertGenerationResult, AlertInDB, AlertListResponse
from gymdesk.services import alert_service

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    severity: AlertSeverity | None = Query(None),
    alert_type: AlertType | None = Query(None),
    is_read: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    alerts, total, unread = await alert_service.list_alerts(
        db, skip=skip, limit=limit, severity=severity, alert_type=alert_type, is_read=is_read
    )
    return AlertListResponse(alerts=alerts, total=total, unread_count=unread)


@router.get("/unread-count")
async def unread_count(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return {"unread_count": await alert_service.get_unread_count(db)}


@router.post("", response_model=AlertInDB, status_code=201)
async def create_alert(
    body: AlertCreate,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return await alert_service.create_alert(
        db, body.alert_type, body.severity, title=body.title, message=body.message
    )


@router.post("/generate", response_model=AlertGenerationResult)
async def generate_alerts(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    """Scan memberships, products and machines and create any missing alerts."""
    counts = await alert_service.generate_alerts(db)
    return AlertGenerationResult(**counts, total=sum(counts.values()))


@router.patch("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return {"updated": await alert_service.mark_all_read(db)}


@router.patch("/{alert_id}/read", response_model=AlertInDB)
async def mark_read(
    alert_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return await alert_service.mark_read(db, alert_id)


# Must be registered before DELETE /{alert_id}
@router.delete("/read")
async def delete_read_alerts(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    return {"deleted": await alert_service.delete_read(db)}


@router.delete("/{alert_id}", status_code=204)
async def delete_alert(
    alert_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    await alert_service.delete_alert(db, alert_id)
