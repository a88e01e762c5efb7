import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from gymdesk.config import settings
from gymdesk.core.middleware import setup_middleware

logger = logging.getLogger(__name__)

_tables_created = False


async def ensure_tables() -> None:
    """Create missing tables, add missing columns and seed defaults once per process."""
    global _tables_created
    if _tables_created:
        return
    from gymdesk.db.base import Base
    from gymdesk.db.engine import async_session_factory, engine
    from gymdesk.db.migrations import apply_migrations
    from gymdesk.db.seed import seed_defaults
    import gymdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await apply_migrations(engine)

    async with async_session_factory() as db:
        await seed_defaults(db)
        await db.commit()

    _tables_created = True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        await ensure_tables()
        logger.info("Database ready at %s", settings.DATABASE_URL)
    except Exception as e:
        logger.error("Database bootstrap failed: %s", e, exc_info=True)
        raise
    yield
    from gymdesk.db.engine import engine
    await engine.dispose()


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Duplicate entry or constraint violation"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="GymDesk API",
        version="0.1.0",
        description="Gym front desk: members, memberships, check-in, point of sale and equipment",
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
    )

    setup_middleware(app)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.get("/health")
    async def health_check():
        from gymdesk.db.engine import engine
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "error", "database": "disconnected"})
        return {"status": "ok", "database": "connected"}

    from gymdesk.api.v1 import router as api_v1_router
    app.include_router(api_v1_router, prefix="/api/v1")

    return app


app = create_app()
