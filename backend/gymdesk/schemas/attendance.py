import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, model_validator


class CheckInRequest(BaseModel):
    member_id: uuid.UUID | None = None
    code: str | None = None

    @model_validator(mode="after")
    def require_identifier(self) -> "CheckInRequest":
        if self.member_id is None and not self.code:
            raise ValueError("Either member_id or code is required")
        return self


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    member_id: uuid.UUID
    member_name: str | None = None
    member_code: str | None = None
    checked_in_at: datetime


class CheckInResponse(AttendanceResponse):
    plan_name: str
    expiration_date: date
    days_remaining: int


class AttendanceListResponse(BaseModel):
    attendance: list[AttendanceResponse]
    total: int


class DailyCount(BaseModel):
    date: date
    count: int


class MemberCount(BaseModel):
    member_id: uuid.UUID
    member_name: str
    member_code: str
    count: int


class HourCount(BaseModel):
    hour: int
    count: int


class AttendanceStats(BaseModel):
    start_date: date
    end_date: date
    total: int
    by_day: list[DailyCount]
    top_members: list[MemberCount]
    peak_hours: list[HourCount]
