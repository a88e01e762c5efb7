import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import BadRequestError, ConflictError, NotFoundError
from gymdesk.core.security import hash_password
from gymdesk.models.user import User
from gymdesk.schemas.auth import ProfileUpdate
from gymdesk.schemas.user_mgmt import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


async def _ensure_unique(
    db: AsyncSession, username: str | None, email: str | None, exclude_id: uuid.UUID | None = None
) -> None:
    """Usernames and emails share one login namespace: each value is checked against both columns."""
    for value, label in ((username, "Username"), (email, "Email")):
        if not value:
            continue
        login = value.lower()
        query = select(User.id).where(or_(func.lower(User.username) == login, func.lower(User.email) == login))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(f"{label} '{value}' is already in use")


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    await _ensure_unique(db, data.username, data.email)
    user = User(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        role=data.role,
        hashed_password=hash_password(data.password),
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Created user %s (%s)", user.username, user.role.value)
    return user


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users(
    db: AsyncSession, skip: int = 0, limit: int = 50, include_inactive: bool = False
) -> tuple[list[User], int]:
    query = select(User)
    count_query = select(func.count(User.id))
    if not include_inactive:
        query = query.where(User.is_active == True)  # noqa: E712
        count_query = count_query.where(User.is_active == True)  # noqa: E712
    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(query.order_by(User.created_at).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def update_user(
    db: AsyncSession, user_id: uuid.UUID, data: UserUpdate, acting_user_id: uuid.UUID | None = None
) -> tuple[User, dict]:
    user = await get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    if user.id == acting_user_id:
        if update_data.get("is_active") is False:
            raise BadRequestError("Cannot deactivate yourself")
        if "role" in update_data and update_data["role"] != user.role:
            raise BadRequestError("Cannot change your own role")
    await _ensure_unique(db, update_data.get("username"), update_data.get("email"), exclude_id=user.id)
    for field, value in update_data.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    return user, update_data


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> tuple[User, dict]:
    """Self-service edit of name, email and photo. Role and status stay with the admins."""
    update_data = data.model_dump(exclude_unset=True)
    await _ensure_unique(db, None, update_data.get("email"), exclude_id=user.id)
    for field, value in update_data.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    logger.info("Profile updated for user %s", user.username)
    return user, update_data


async def set_password(db: AsyncSession, user_id: uuid.UUID, new_password: str) -> User:
    user = await get_user(db, user_id)
    user.hashed_password = hash_password(new_password)
    await db.flush()
    return user


async def deactivate_user(db: AsyncSession, user_id: uuid.UUID, acting_user_id: uuid.UUID) -> User:
    if user_id == acting_user_id:
        raise BadRequestError("Cannot delete yourself")
    user = await get_user(db, user_id)
    user.is_active = False
    await db.flush()
    return user
