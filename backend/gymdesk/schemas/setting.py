from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SettingUpdate(BaseModel):
    value: str | None
    description: str | None = None


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str | None = None
    description: str | None = None
    updated_at: datetime
