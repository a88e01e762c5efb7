import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.models.membership import PaymentMethod


class MembershipAssign(BaseModel):
    member_id: uuid.UUID
    plan_id: uuid.UUID
    start_date: date | None = None
    amount_paid: float | None = Field(None, ge=0, description="Defaults to the plan price")
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    member_id: uuid.UUID
    plan_id: uuid.UUID
    plan_name: str | None = None
    member_name: str | None = None
    member_code: str | None = None
    start_date: date
    expiration_date: date
    amount_paid: float
    payment_method: PaymentMethod
    notes: str | None = None
    is_active: bool
    status: str
    days_remaining: int
    created_at: datetime


class MembershipListResponse(BaseModel):
    memberships: list[MembershipResponse]
    total: int
