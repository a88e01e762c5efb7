"""
Alert service: create, read and generate alerts.

Generation scans memberships, inventory and machines on demand and never
creates a second unread alert for the same type and reference.
"""
import logging
import uuid

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.exceptions import NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.alert import Alert, AlertSeverity, AlertType
from gymdesk.rules.dates import days_remaining
from gymdesk.rules.thresholds import is_expiring, is_low_stock, is_maintenance_due
from gymdesk.services import machine_service, membership_service, product_service, setting_service

logger = logging.getLogger(__name__)


async def create_alert(
    db: AsyncSession,
    alert_type: AlertType | str,
    severity: AlertSeverity | str,
    title: str,
    message: str,
    reference_type: str | None = None,
    reference_id: uuid.UUID | str | None = None,
) -> Alert:
    alert = Alert(
        alert_type=AlertType(alert_type),
        severity=AlertSeverity(severity),
        title=title,
        message=message,
        reference_type=reference_type,
        reference_id=str(reference_id) if reference_id else None,
        is_read=False,
    )
    db.add(alert)
    await db.flush()
    await db.refresh(alert)
    logger.info("Alert created: [%s] %s", alert.severity.value, title)
    return alert


async def get_alert(db: AsyncSession, alert_id: uuid.UUID) -> Alert:
    result = await db.execute(select(Alert).where(Alert.id == alert_id))
    alert = result.scalar_one_or_none()
    if not alert:
        raise NotFoundError("Alert not found")
    return alert


async def mark_read(db: AsyncSession, alert_id: uuid.UUID) -> Alert:
    alert = await get_alert(db, alert_id)
    alert.is_read = True
    await db.flush()
    await db.refresh(alert)
    return alert


async def mark_all_read(db: AsyncSession) -> int:
    result = await db.execute(
        update(Alert).where(Alert.is_read == False).values(is_read=True)  # noqa: E712
    )
    return result.rowcount or 0


async def delete_alert(db: AsyncSession, alert_id: uuid.UUID) -> None:
    alert = await get_alert(db, alert_id)
    await db.delete(alert)
    await db.flush()


async def delete_read(db: AsyncSession) -> int:
    result = await db.execute(delete(Alert).where(Alert.is_read == True))  # noqa: E712
    return result.rowcount or 0


async def get_unread_count(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Alert.id)).where(Alert.is_read == False)  # noqa: E712
    )
    return result.scalar() or 0


async def list_alerts(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    severity: AlertSeverity | None = None,
    alert_type: AlertType | None = None,
    is_read: bool | None = None,
) -> tuple[list[Alert], int, int]:
    """List alerts with optional filters. Returns (alerts, total, unread_count)."""
    filters = []
    if severity is not None:
        filters.append(Alert.severity == severity)
    if alert_type is not None:
        filters.append(Alert.alert_type == alert_type)
    if is_read is not None:
        filters.append(Alert.is_read == is_read)

    total = (await db.execute(select(func.count(Alert.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Alert).where(*filters).order_by(Alert.created_at.desc()).offset(skip).limit(limit)
    )
    alerts = list(result.scalars().all())
    unread = await get_unread_count(db)
    return alerts, total, unread


async def _has_unread(db: AsyncSession, alert_type: AlertType, reference_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(Alert.id).where(
            Alert.alert_type == alert_type,
            Alert.reference_id == str(reference_id),
            Alert.is_read == False,  # noqa: E712
        ).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def generate_alerts(db: AsyncSession) -> dict[str, int]:
    """Scan for expiring memberships, low stock, expiring products and due maintenance."""
    today = utc_today()
    membership_days = await setting_service.get_int(db, "membership_alert_days", settings.MEMBERSHIP_ALERT_DAYS)
    product_days = await setting_service.get_int(db, "product_alert_days", settings.PRODUCT_ALERT_DAYS)
    counts = {
        AlertType.MEMBERSHIP_EXPIRING.value: 0,
        AlertType.LOW_STOCK.value: 0,
        AlertType.PRODUCT_EXPIRING.value: 0,
        AlertType.MAINTENANCE_DUE.value: 0,
    }

    for membership in await membership_service.list_expiring(db, membership_days):
        if await _has_unread(db, AlertType.MEMBERSHIP_EXPIRING, membership.id):
            continue
        remaining = days_remaining(membership.expiration_date, today)
        await create_alert(
            db,
            AlertType.MEMBERSHIP_EXPIRING,
            AlertSeverity.CRITICAL if remaining <= 1 else AlertSeverity.WARNING,
            title=f"Membership expiring: {membership.member_name}",
            message=(
                f"{membership.plan_name} membership of {membership.member_name} "
                f"({membership.member_code}) expires on {membership.expiration_date.isoformat()}"
            ),
            reference_type="membership",
            reference_id=membership.id,
        )
        counts[AlertType.MEMBERSHIP_EXPIRING.value] += 1

    for product in await product_service.list_low_stock(db):
        if await _has_unread(db, AlertType.LOW_STOCK, product.id):
            continue
        await create_alert(
            db,
            AlertType.LOW_STOCK,
            AlertSeverity.CRITICAL if is_low_stock(product.stock, 0) else AlertSeverity.WARNING,
            title=f"Low stock: {product.name}",
            message=f"{product.name} ({product.sku}) has {product.stock} units left (minimum {product.min_stock})",
            reference_type="product",
            reference_id=product.id,
        )
        counts[AlertType.LOW_STOCK.value] += 1

    for product in await product_service.list_expiring(db, product_days):
        if await _has_unread(db, AlertType.PRODUCT_EXPIRING, product.id):
            continue
        expired = is_expiring(product.expiration_date, today, window_days=-1)  # before today
        await create_alert(
            db,
            AlertType.PRODUCT_EXPIRING,
            AlertSeverity.CRITICAL if expired else AlertSeverity.WARNING,
            title=f"{'Expired' if expired else 'Expiring'} product: {product.name}",
            message=f"{product.name} ({product.sku}) expiration date: {product.expiration_date.isoformat()}",
            reference_type="product",
            reference_id=product.id,
        )
        counts[AlertType.PRODUCT_EXPIRING.value] += 1

    for machine in await machine_service.list_maintenance_due(db, settings.MAINTENANCE_ALERT_DAYS):
        if await _has_unread(db, AlertType.MAINTENANCE_DUE, machine.id):
            continue
        overdue = is_maintenance_due(machine.next_maintenance, today, window_days=-1)  # before today
        await create_alert(
            db,
            AlertType.MAINTENANCE_DUE,
            AlertSeverity.CRITICAL if overdue else AlertSeverity.INFO,
            title=f"Maintenance {'overdue' if overdue else 'due'}: {machine.name}",
            message=f"{machine.name} ({machine.code}) maintenance due on {machine.next_maintenance.isoformat()}",
            reference_type="machine",
            reference_id=machine.id,
        )
        counts[AlertType.MAINTENANCE_DUE.value] += 1

    logger.info("Alert generation finished: %s", counts)
    return counts
