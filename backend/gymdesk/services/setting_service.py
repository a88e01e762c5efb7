from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import NotFoundError
from gymdesk.models.setting import Setting

DEFAULT_SETTINGS: dict[str, tuple[str, str]] = {
    "gym_name": ("GymDesk", "Gym name shown on receipts and emails"),
    "gym_address": ("", "Street address"),
    "gym_phone": ("", "Contact phone"),
    "gym_email": ("", "Contact email"),
    "membership_alert_days": ("7", "Days before expiration to warn about memberships"),
    "product_alert_days": ("15", "Days before expiration to warn about products"),
    "currency": ("$", "Currency symbol"),
}


async def list_settings(db: AsyncSession) -> list[Setting]:
    result = await db.execute(select(Setting).order_by(Setting.key))
    return list(result.scalars().all())


async def get_setting(db: AsyncSession, key: str) -> Setting:
    result = await db.execute(select(Setting).where(Setting.key == key))
    setting = result.scalar_one_or_none()
    if not setting:
        raise NotFoundError(f"Setting '{key}' not found")
    return setting


async def get_value(db: AsyncSession, key: str, default: str | None = None) -> str | None:
    result = await db.execute(select(Setting.value).where(Setting.key == key))
    value = result.scalar_one_or_none()
    if value is None:
        return DEFAULT_SETTINGS.get(key, (default, ""))[0]
    return value


async def get_int(db: AsyncSession, key: str, default: int) -> int:
    value = await get_value(db, key)
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


async def upsert_setting(db: AsyncSession, key: str, value: str | None, description: str | None = None) -> Setting:
    result = await db.execute(select(Setting).where(Setting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = Setting(key=key, value=value, description=description)
        db.add(setting)
    else:
        setting.value = value
        if description is not None:
            setting.description = description
    await db.flush()
    await db.refresh(setting)
    return setting
