import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.core.exceptions import ForbiddenError, UnauthorizedError
from gymdesk.core.permissions import Permission, permissions_for
from gymdesk.core.security import decode_token
from gymdesk.db.session import get_db
from gymdesk.models.user import User

bearer_scheme = HTTPBearer()


@dataclass(frozen=True)
class RequestContext:
    """The authenticated caller of a request, handed explicitly to services that audit."""

    user: User
    request_id: str | None = None
    ip_address: str | None = None

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def permissions(self) -> frozenset[Permission]:
        return permissions_for(self.user.role)

    def can(self, permission: Permission) -> bool:
        return permission in self.permissions


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise UnauthorizedError()

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub"))
    except (ValueError, TypeError):
        raise UnauthorizedError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return user


async def get_request_context(
    request: Request,
    user: User = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(
        user=user,
        request_id=getattr(request.state, "request_id", None),
        ip_address=client_ip(request),
    )


def require_permission(*required: Permission) -> Callable[..., Awaitable[RequestContext]]:
    """Dependency factory: the caller's role must grant every listed permission."""

    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        missing = [p for p in required if not ctx.can(p)]
        if missing:
            raise ForbiddenError(f"Missing permission: {missing[0].value}")
        return ctx

    return dependency
