import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.models.machine import MachineCondition
from gymdesk.schemas.machine import (
    MachineCreate,
    MachineDetailResponse,
    MachineListResponse,
    MachineResponse,
    MachineUpdate,
    MaintenanceCreate,
    MaintenanceResponse,
)
from gymdesk.services import machine_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/machines", tags=["machines"])

can_manage = require_permission(Permission.MANAGE_MACHINES)


@router.get("", response_model=MachineListResponse)
async def list_machines(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    search: str | None = Query(None, max_length=100),
    category: str | None = Query(None),
    condition: MachineCondition | None = Query(None),
    is_active: bool | None = Query(True),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_manage),
):
    machines, total = await machine_service.list_machines(
        db, skip=skip, limit=limit, search=search, category=category,
        condition=condition, is_active=is_active,
    )
    return MachineListResponse(machines=machines, total=total)


@router.get("/categories", response_model=list[str])
async def machine_categories(
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_manage),
):
    return await machine_service.list_categories(db)


@router.get("/maintenance-due", response_model=MachineListResponse)
async def maintenance_due(
    days: int = Query(7, ge=0, le=365),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_manage),
):
    machines = await machine_service.list_maintenance_due(db, days)
    return MachineListResponse(machines=machines, total=len(machines))


@router.post("", response_model=MachineResponse, status_code=201)
async def create_machine(
    body: MachineCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    machine = await machine_service.create_machine(db, body)
    await log_action(
        db, ctx, action=AuditAction.CREATE, entity_type=EntityType.MACHINE, entity_id=machine.id,
        detail={"code": machine.code, "name": machine.name},
    )
    return machine


@router.get("/{machine_id}", response_model=MachineDetailResponse)
async def get_machine(
    machine_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_manage),
):
    machine = await machine_service.get_machine(db, machine_id)
    records = await machine_service.list_maintenance(db, machine.id, limit=10)
    return MachineDetailResponse(
        **MachineResponse.model_validate(machine).model_dump(),
        recent_maintenance=records,
    )


@router.put("/{machine_id}", response_model=MachineResponse)
async def update_machine(
    machine_id: uuid.UUID,
    body: MachineUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    machine, changes = await machine_service.update_machine(db, machine_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.MACHINE, entity_id=machine.id, detail=changes,
    )
    return machine


@router.delete("/{machine_id}", status_code=204)
async def delete_machine(
    machine_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    machine = await machine_service.deactivate_machine(db, machine_id)
    await log_action(
        db, ctx, action=AuditAction.DELETE, entity_type=EntityType.MACHINE, entity_id=machine.id,
        detail={"code": machine.code, "name": machine.name},
    )


@router.post("/{machine_id}/maintenance", response_model=MaintenanceResponse, status_code=201)
async def add_maintenance(
    machine_id: uuid.UUID,
    body: MaintenanceCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_manage),
):
    record, machine = await machine_service.add_maintenance(db, ctx, machine_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.MACHINE, entity_id=machine.id,
        detail={
            "maintenance": body.kind.value,
            "performed_on": body.performed_on.isoformat(),
            "next_maintenance": machine.next_maintenance.isoformat() if machine.next_maintenance else None,
        },
    )
    return record


@router.get("/{machine_id}/maintenance", response_model=list[MaintenanceResponse])
async def list_maintenance(
    machine_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(can_manage),
):
    machine = await machine_service.get_machine(db, machine_id)
    return await machine_service.list_maintenance(db, machine.id)
