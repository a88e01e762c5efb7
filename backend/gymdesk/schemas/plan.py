import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.rules.dates import DurationUnit


class PlanCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    duration: int = Field(gt=0)
    duration_unit: DurationUnit = DurationUnit.DAYS
    price: float = Field(gt=0)
    is_active: bool = True


class PlanUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    duration: int | None = Field(None, gt=0)
    duration_unit: DurationUnit | None = None
    price: float | None = Field(None, gt=0)
    is_active: bool | None = None


class PlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    duration: int
    duration_unit: DurationUnit
    price: float
    price_per_day: float
    is_active: bool
    created_at: datetime


class PlanDetailResponse(PlanResponse):
    active_members: int = 0


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]
    total: int
