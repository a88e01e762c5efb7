"""Create missing tables, apply column migrations and seed defaults."""
import asyncio

from gymdesk.db.base import Base
from gymdesk.db.engine import async_session_factory, engine
from gymdesk.db.migrations import apply_migrations
from gymdesk.db.seed import seed_defaults
import gymdesk.models  # noqa: F401


async def migrate():
    print("Migrating database...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables ready")

    applied = await apply_migrations(engine)
    for sql in applied:
        print(f"  applied: {sql}")
    if not applied:
        print("Schema already up to date")

    async with async_session_factory() as db:
        created = await seed_defaults(db)
        await db.commit()
    print(f"Seeded: {created['users']} users, {created['plans']} plans, {created['settings']} settings")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(migrate())
