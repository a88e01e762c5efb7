"""Persistent audit log of staff write actions."""
import enum
import uuid

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from gymdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AuditAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"


class EntityType(str, enum.Enum):
    USER = "user"
    MEMBER = "member"
    PLAN = "plan"
    MEMBERSHIP = "membership"
    PAYMENT = "payment"
    PRODUCT = "product"
    SALE = "sale"
    MACHINE = "machine"
    ALERT = "alert"
    SETTING = "setting"


class AuditLog(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "audit_logs"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    action: Mapped[str] = mapped_column(String(20), index=True, nullable=False)  # create, update, delete, login
    entity_type: Mapped[str] = mapped_column(String(50), index=True, nullable=False)  # member, plan, sale, ...
    entity_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    detail: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(50), nullable=True)
    request_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
