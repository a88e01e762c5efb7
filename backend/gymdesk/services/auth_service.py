import logging
import re
import secrets
import uuid
from datetime import timedelta

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.config import settings
from gymdesk.core.exceptions import BadRequestError, UnauthorizedError
from gymdesk.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from gymdesk.db.base import as_utc, utcnow
from gymdesk.models.user import User
from gymdesk.services import setting_service
from gymdesk.services.email_service import send_password_reset_code

logger = logging.getLogger(__name__)

# More than 8 characters with an uppercase letter, a digit and a special character
STRONG_PASSWORD_RE = re.compile(
    r"^(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).{9,}$"
)


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    login = username.strip().lower()
    # A username match wins over an email match
    result = await db.execute(
        select(User)
        .where(or_(func.lower(User.username) == login, func.lower(User.email) == login))
        .order_by(case((func.lower(User.username) == login, 0), else_=1))
        .limit(1)
    )
    user = result.scalars().first()

    if not user or not verify_password(password, user.hashed_password):
        raise UnauthorizedError("Invalid username or password")

    if not user.is_active:
        raise UnauthorizedError("Account is disabled")

    user.last_login_at = utcnow()
    await db.flush()
    return user


def create_tokens(user: User) -> dict:
    access_token = create_access_token(
        subject=str(user.id),
        extra_claims={"role": user.role.value, "username": user.username},
    )
    refresh_token = create_refresh_token(subject=str(user.id))
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": user,
    }


async def refresh_access_token(db: AsyncSession, refresh_token: str) -> dict:
    try:
        payload = decode_token(refresh_token)
    except ValueError:
        raise UnauthorizedError("Invalid refresh token")

    if payload.get("type") != "refresh":
        raise UnauthorizedError("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub"))
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid refresh token")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return create_tokens(user)


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise BadRequestError("Current password is incorrect")
    user.hashed_password = hash_password(new_password)
    await db.flush()
    logger.info("Password changed for user %s", user.username)


async def request_password_reset(db: AsyncSession, email: str) -> bool:
    """Store a 6-digit reset code on the account and email it. Unknown emails are a silent no-op."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower(), User.is_active == True)  # noqa: E712
    )
    user = result.scalar_one_or_none()
    if not user:
        logger.info("Password reset requested for unknown email")
        return False

    user.reset_code = f"{secrets.randbelow(900000) + 100000}"
    user.reset_code_expires_at = utcnow() + timedelta(minutes=settings.RESET_CODE_TTL_MINUTES)
    user.reset_attempts = 0
    await db.flush()

    gym_name = await setting_service.get_value(db, "gym_name") or "GymDesk"
    sent = await send_password_reset_code(user.email, user.full_name or user.username, user.reset_code, gym_name)
    if not sent:
        logger.warning("Reset code for %s was stored but not emailed", user.username)
    return sent


async def reset_password(db: AsyncSession, email: str, code: str, new_password: str) -> None:
    """Set a new password from an emailed code.

    Each wrong code counts against the account. After RESET_CODE_MAX_ATTEMPTS
    misses the code is discarded and a new one must be requested.
    """
    if not STRONG_PASSWORD_RE.match(new_password):
        raise BadRequestError(
            "Password must be more than 8 characters and contain an uppercase letter, "
            "a number and a special character"
        )

    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    user = result.scalars().first()
    if not user or not user.reset_code or user.reset_code_expires_at is None:
        raise BadRequestError("Invalid code or email")

    if not secrets.compare_digest(user.reset_code, code):
        user.reset_attempts = (user.reset_attempts or 0) + 1
        if user.reset_attempts >= settings.RESET_CODE_MAX_ATTEMPTS:
            logger.warning("Reset code for %s discarded after %d failed attempts", user.username, user.reset_attempts)
            _clear_reset_code(user)
        # The failed attempt must survive the error response's rollback
        await db.commit()
        raise BadRequestError("Invalid code or email")

    if as_utc(user.reset_code_expires_at) < utcnow():
        raise BadRequestError("Code expired")

    user.hashed_password = hash_password(new_password)
    _clear_reset_code(user)
    await db.flush()
    logger.info("Password reset completed for user %s", user.username)


def _clear_reset_code(user: User) -> None:
    user.reset_code = None
    user.reset_code_expires_at = None
    user.reset_attempts = 0
