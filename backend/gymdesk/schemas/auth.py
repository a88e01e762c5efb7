import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from gymdesk.models.user import UserRole


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, description="Username or email")
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str | None = None
    full_name: str | None = None
    role: UserRole
    is_active: bool
    photo_url: str | None = None
    last_login_at: datetime | None = None


class MeResponse(UserResponse):
    permissions: list[str] = []


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6)
    new_password: str


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    email: EmailStr | None = None
    photo_url: str | None = None
