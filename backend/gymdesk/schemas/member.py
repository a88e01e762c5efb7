import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from gymdesk.schemas.membership import MembershipResponse


class MemberCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = None
    birth_date: date | None = None
    address: str | None = None
    photo_url: str | None = None
    medical_conditions: str | None = None
    allergies: str | None = None
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    notes: str | None = None


class MemberUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=50)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = None
    birth_date: date | None = None
    address: str | None = None
    photo_url: str | None = None
    medical_conditions: str | None = None
    allergies: str | None = None
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    notes: str | None = None
    is_active: bool | None = None


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    first_name: str
    last_name: str
    full_name: str
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    address: str | None = None
    photo_url: str | None = None
    medical_conditions: str | None = None
    allergies: str | None = None
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    notes: str | None = None
    is_active: bool
    created_at: datetime


class MemberDetailResponse(MemberResponse):
    active_membership: MembershipResponse | None = None
    attendance_last_30_days: int = 0


class MemberAccessResponse(MemberResponse):
    active_membership: MembershipResponse | None = None
    has_access: bool


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    total: int
