import logging
import uuid
from datetime import timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext
from gymdesk.core.exceptions import ConflictError, NotFoundError
from gymdesk.db.base import utc_today
from gymdesk.models.machine import Machine, MachineCondition, MaintenanceRecord
from gymdesk.rules.thresholds import next_maintenance_date
from gymdesk.schemas.machine import MachineCreate, MachineUpdate, MaintenanceCreate

logger = logging.getLogger(__name__)


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: uuid.UUID | None = None) -> None:
    query = select(Machine.id).where(Machine.code == code)
    if exclude_id is not None:
        query = query.where(Machine.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise ConflictError(f"Machine code '{code}' already exists")


async def create_machine(db: AsyncSession, data: MachineCreate) -> Machine:
    await _ensure_code_free(db, data.code)
    machine = Machine(**data.model_dump(), is_active=True)
    machine.next_maintenance = next_maintenance_date(machine.last_maintenance, machine.maintenance_interval_days)
    db.add(machine)
    await db.flush()
    await db.refresh(machine)
    return machine


async def get_machine(db: AsyncSession, machine_id: uuid.UUID) -> Machine:
    result = await db.execute(select(Machine).where(Machine.id == machine_id))
    machine = result.scalar_one_or_none()
    if not machine:
        raise NotFoundError(f"Machine {machine_id} not found")
    return machine


async def list_machines(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    category: str | None = None,
    condition: MachineCondition | None = None,
    is_active: bool | None = True,
) -> tuple[list[Machine], int]:
    filters = []
    if is_active is not None:
        filters.append(Machine.is_active == is_active)
    if category:
        filters.append(Machine.category == category)
    if condition is not None:
        filters.append(Machine.condition == condition)
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            Machine.name.ilike(pattern),
            Machine.code.ilike(pattern),
            Machine.brand.ilike(pattern),
            Machine.model.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Machine.id)).where(*filters))).scalar() or 0
    result = await db.execute(select(Machine).where(*filters).order_by(Machine.name).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def update_machine(db: AsyncSession, machine_id: uuid.UUID, data: MachineUpdate) -> tuple[Machine, dict]:
    machine = await get_machine(db, machine_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("code") and update_data["code"] != machine.code:
        await _ensure_code_free(db, update_data["code"], exclude_id=machine.id)
    for field, value in update_data.items():
        setattr(machine, field, value)
    if {"last_maintenance", "maintenance_interval_days"} & update_data.keys():
        machine.next_maintenance = next_maintenance_date(
            machine.last_maintenance, machine.maintenance_interval_days
        )
    await db.flush()
    await db.refresh(machine)
    return machine, update_data


async def deactivate_machine(db: AsyncSession, machine_id: uuid.UUID) -> Machine:
    machine = await get_machine(db, machine_id)
    machine.is_active = False
    await db.flush()
    return machine


async def add_maintenance(
    db: AsyncSession, ctx: RequestContext, machine_id: uuid.UUID, data: MaintenanceCreate
) -> tuple[MaintenanceRecord, Machine]:
    machine = await get_machine(db, machine_id)
    record = MaintenanceRecord(
        machine_id=machine.id,
        performed_on=data.performed_on,
        kind=data.kind,
        description=data.description,
        cost=data.cost,
        performed_by=data.performed_by,
        recorded_by=ctx.user_id,
    )
    db.add(record)

    # An older record entered late never moves the schedule backwards
    if machine.last_maintenance is None or data.performed_on >= machine.last_maintenance:
        machine.last_maintenance = data.performed_on
        machine.next_maintenance = next_maintenance_date(data.performed_on, machine.maintenance_interval_days)
    await db.flush()
    await db.refresh(record)
    await db.refresh(machine)
    logger.info("Maintenance logged for machine %s, next due %s", machine.code, machine.next_maintenance)
    return record, machine


async def list_maintenance(
    db: AsyncSession, machine_id: uuid.UUID, limit: int | None = None
) -> list[MaintenanceRecord]:
    query = (
        select(MaintenanceRecord)
        .where(MaintenanceRecord.machine_id == machine_id)
        .order_by(MaintenanceRecord.performed_on.desc(), MaintenanceRecord.created_at.desc())
    )
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_maintenance_due(db: AsyncSession, days: int = 7) -> list[Machine]:
    limit_date = utc_today() + timedelta(days=days)
    result = await db.execute(
        select(Machine)
        .where(
            Machine.is_active == True,  # noqa: E712
            Machine.next_maintenance.is_not(None),
            Machine.next_maintenance <= limit_date,  # is_maintenance_due
        )
        .order_by(Machine.next_maintenance)
    )
    return list(result.scalars().all())


async def list_categories(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(Machine.category)
        .where(Machine.category.is_not(None), Machine.category != "")
        .distinct()
        .order_by(Machine.category)
    )
    return list(result.scalars().all())
