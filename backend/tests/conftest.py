import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_gym.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RESEND_API_KEY"] = ""

import uuid
from collections.abc import AsyncIterator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from gymdesk.core.middleware import limiter
from gymdesk.core.security import hash_password
from gymdesk.db.base import Base
from gymdesk.db.session import get_db
from gymdesk.main import create_app
from gymdesk.models.member import Member
from gymdesk.models.plan import MembershipPlan
from gymdesk.models.product import Product
from gymdesk.models.user import User, UserRole
from gymdesk.rules.dates import DurationUnit

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_gym.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

PASSWORD = "testpass123"


@event.listens_for(engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture(autouse=True)
async def reset_rate_limiter():
    """Reset the login rate limiter between tests to prevent cross-test pollution."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    import gymdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(db: AsyncSession, username: str, role: UserRole, email: str | None = None) -> User:
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=email,
        full_name=username.title(),
        hashed_password=hash_password(PASSWORD),
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def _login(client: AsyncClient, username: str) -> dict:
    response = await client.post("/api/v1/auth/login", json={"username": username, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "testadmin", UserRole.ADMIN, "testadmin@gymdesk.com")


@pytest_asyncio.fixture
async def reception_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "frontdesk", UserRole.RECEPTION, "frontdesk@gymdesk.com")


@pytest_asyncio.fixture
async def cashier_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "till", UserRole.CASHIER)


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient, admin_user: User) -> dict:
    return await _login(client, admin_user.username)


@pytest_asyncio.fixture
async def reception_headers(client: AsyncClient, reception_user: User) -> dict:
    return await _login(client, reception_user.username)


@pytest_asyncio.fixture
async def cashier_headers(client: AsyncClient, cashier_user: User) -> dict:
    return await _login(client, cashier_user.username)


@pytest_asyncio.fixture
async def member(db_session: AsyncSession) -> Member:
    m = Member(code="M0001", first_name="Ana", last_name="Lopez", email="ana@mail.com", phone="5550001")
    db_session.add(m)
    await db_session.commit()
    await db_session.refresh(m)
    return m


@pytest_asyncio.fixture
async def monthly_plan(db_session: AsyncSession) -> MembershipPlan:
    plan = MembershipPlan(name="Monthly", duration=1, duration_unit=DurationUnit.MONTHS, price=80.0)
    db_session.add(plan)
    await db_session.commit()
    await db_session.refresh(plan)
    return plan


@pytest_asyncio.fixture
async def product(db_session: AsyncSession) -> Product:
    p = Product(sku="WATER-1L", name="Water 1L", category="drinks", price=10.0, cost=4.0, stock=20, min_stock=5)
    db_session.add(p)
    await db_session.commit()
    await db_session.refresh(p)
    return p
