import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.security import hash_password
from gymdesk.models.plan import MembershipPlan
from gymdesk.models.setting import Setting
from gymdesk.models.user import User, UserRole
from gymdesk.rules.dates import DurationUnit
from gymdesk.services.setting_service import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    ("Daily", "Single day pass", 1, DurationUnit.DAYS, 5.00),
    ("Weekly", "Seven days of access", 7, DurationUnit.DAYS, 25.00),
    ("Monthly", "One calendar month", 1, DurationUnit.MONTHS, 80.00),
    ("Quarterly", "Three calendar months", 3, DurationUnit.MONTHS, 200.00),
    ("Semiannual", "Six calendar months", 6, DurationUnit.MONTHS, 350.00),
    ("Annual", "One calendar year", 1, DurationUnit.YEARS, 600.00),
]


async def seed_defaults(db: AsyncSession) -> dict[str, int]:
    """Insert the admin user, default plans and default settings when absent."""
    created = {"users": 0, "plans": 0, "settings": 0}

    admin = await db.execute(select(User.id).where(User.username == "admin"))
    if admin.scalar_one_or_none() is None:
        db.add(User(
            username="admin",
            full_name="Administrator",
            role=UserRole.ADMIN,
            hashed_password=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            is_active=True,
        ))
        created["users"] = 1
        logger.warning("Created default admin user; change its password")

    plan_count = (await db.execute(select(func.count()).select_from(MembershipPlan))).scalar() or 0
    if plan_count == 0:
        for name, description, duration, unit, price in DEFAULT_PLANS:
            db.add(MembershipPlan(
                name=name, description=description, duration=duration,
                duration_unit=unit, price=price, is_active=True,
            ))
        created["plans"] = len(DEFAULT_PLANS)

    existing = set((await db.execute(select(Setting.key))).scalars().all())
    for key, (value, description) in DEFAULT_SETTINGS.items():
        if key not in existing:
            db.add(Setting(key=key, value=value, description=description))
            created["settings"] += 1

    await db.flush()
    if any(created.values()):
        logger.info("Seeded defaults: %s", created)
    return created
