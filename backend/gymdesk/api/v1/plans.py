import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.dependencies import RequestContext, get_request_context, require_permission
from gymdesk.core.permissions import Permission
from gymdesk.db.session import get_db
from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.schemas.plan import PlanCreate, PlanDetailResponse, PlanListResponse, PlanResponse, PlanUpdate
from gymdesk.services import plan_service
from gymdesk.services.audit_service import log_action

router = APIRouter(prefix="/plans", tags=["plans"])

can_configure = require_permission(Permission.CONFIGURE_SYSTEM)


@router.get("", response_model=PlanListResponse)
async def list_plans(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    active_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    plans, total = await plan_service.list_plans(db, skip=skip, limit=limit, active_only=active_only)
    return PlanListResponse(plans=plans, total=total)


@router.post("", response_model=PlanResponse, status_code=201)
async def create_plan(
    body: PlanCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_configure),
):
    plan = await plan_service.create_plan(db, body)
    await log_action(
        db, ctx, action=AuditAction.CREATE, entity_type=EntityType.PLAN, entity_id=plan.id,
        detail=body.model_dump(),
    )
    return plan


@router.get("/{plan_id}", response_model=PlanDetailResponse)
async def get_plan(
    plan_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _ctx: RequestContext = Depends(get_request_context),
):
    plan = await plan_service.get_plan(db, plan_id)
    return PlanDetailResponse(
        **PlanResponse.model_validate(plan).model_dump(),
        active_members=await plan_service.count_active_members(db, plan.id),
    )


@router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: uuid.UUID,
    body: PlanUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_configure),
):
    plan, changes = await plan_service.update_plan(db, plan_id, body)
    await log_action(
        db, ctx, action=AuditAction.UPDATE, entity_type=EntityType.PLAN, entity_id=plan.id, detail=changes,
    )
    return plan


@router.delete("/{plan_id}", status_code=204)
async def delete_plan(
    plan_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(can_configure),
):
    plan = await plan_service.deactivate_plan(db, plan_id)
    await log_action(
        db, ctx, action=AuditAction.DELETE, entity_type=EntityType.PLAN, entity_id=plan.id,
        detail={"name": plan.name},
    )
