import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.models.alert import AlertSeverity, AlertType


class AlertCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    severity: AlertSeverity = AlertSeverity.INFO
    alert_type: AlertType = AlertType.MANUAL


class AlertInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    alert_type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    reference_type: str | None = None
    reference_id: str | None = None
    is_read: bool
    created_at: datetime


class AlertListResponse(BaseModel):
    alerts: list[AlertInDB]
    total: int
    unread_count: int


class AlertGenerationResult(BaseModel):
    membership_expiring: int = 0
    low_stock: int = 0
    product_expiring: int = 0
    maintenance_due: int = 0
    total: int = 0
