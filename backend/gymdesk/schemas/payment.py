import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.models.membership import PaymentMethod
from gymdesk.models.payment import PaymentKind


class PaymentCreate(BaseModel):
    member_id: uuid.UUID | None = None
    concept: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)
    method: PaymentMethod = PaymentMethod.CASH
    kind: PaymentKind = PaymentKind.OTHER


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    member_id: uuid.UUID | None = None
    membership_id: uuid.UUID | None = None
    sale_id: uuid.UUID | None = None
    kind: PaymentKind
    concept: str
    amount: float
    method: PaymentMethod
    recorded_by: uuid.UUID | None = None
    created_at: datetime


class PaymentListResponse(BaseModel):
    payments: list[PaymentResponse]
    total: int
    total_amount: float
