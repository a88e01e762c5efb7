import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from gymdesk.models.audit_log import AuditAction, EntityType
from gymdesk.models.user import UserRole


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    email: EmailStr | None = None
    full_name: str | None = None
    role: UserRole = UserRole.RECEPTION


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=100)
    email: EmailStr | None = None
    full_name: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
    photo_url: str | None = None


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=6)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str | None = None
    full_name: str | None = None
    role: UserRole
    is_active: bool
    photo_url: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime


class UserListResponse(BaseModel):
    users: list[UserOut]
    total: int


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID | None = None
    username: str | None = None
    action: AuditAction
    entity_type: EntityType
    entity_id: str | None = None
    detail: dict | None = None
    ip_address: str | None = None
    request_id: str | None = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    logs: list[AuditLogOut]
    total: int
