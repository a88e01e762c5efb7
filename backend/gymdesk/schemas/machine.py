import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.models.machine import MachineCondition, MaintenanceKind


class MachineCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    category: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    purchase_date: date | None = None
    cost: float | None = Field(None, ge=0)
    condition: MachineCondition = MachineCondition.GOOD
    photo_url: str | None = None
    maintenance_interval_days: int = Field(90, gt=0)
    last_maintenance: date | None = None
    notes: str | None = None


class MachineUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)
    category: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    purchase_date: date | None = None
    cost: float | None = Field(None, ge=0)
    condition: MachineCondition | None = None
    photo_url: str | None = None
    maintenance_interval_days: int | None = Field(None, gt=0)
    last_maintenance: date | None = None
    notes: str | None = None
    is_active: bool | None = None


class MachineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    category: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    purchase_date: date | None = None
    cost: float | None = None
    condition: MachineCondition
    photo_url: str | None = None
    maintenance_interval_days: int
    last_maintenance: date | None = None
    next_maintenance: date | None = None
    notes: str | None = None
    is_active: bool
    created_at: datetime


class MaintenanceCreate(BaseModel):
    performed_on: date
    kind: MaintenanceKind
    description: str = Field(min_length=1)
    cost: float | None = Field(None, ge=0)
    performed_by: str | None = None


class MaintenanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    machine_id: uuid.UUID
    performed_on: date
    kind: MaintenanceKind
    description: str
    cost: float | None = None
    performed_by: str | None = None
    created_at: datetime


class MachineDetailResponse(MachineResponse):
    recent_maintenance: list[MaintenanceResponse] = []


class MachineListResponse(BaseModel):
    machines: list[MachineResponse]
    total: int
