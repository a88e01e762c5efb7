import enum
import uuid
from datetime import date

from sqlalchemy import Boolean, Date, Float, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gymdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, enum_column, utc_today
from gymdesk.rules.dates import days_remaining, is_membership_active


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class Membership(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A time-bounded subscription of one member to one plan."""

    __tablename__ = "memberships"

    member_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False
    )
    plan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("membership_plans.id", ondelete="RESTRICT"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiration_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod, "payment_method"), default=PaymentMethod.CASH, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # False once superseded by a newer membership for the same member
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    registered_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    member = relationship("Member", lazy="joined")
    plan = relationship("MembershipPlan", lazy="joined")

    @property
    def plan_name(self) -> str | None:
        return self.plan.name if self.plan else None

    @property
    def member_name(self) -> str | None:
        return self.member.full_name if self.member else None

    @property
    def member_code(self) -> str | None:
        return self.member.code if self.member else None

    @property
    def status(self) -> str:
        return "active" if is_membership_active(self.expiration_date, utc_today()) else "expired"

    @property
    def days_remaining(self) -> int:
        return days_remaining(self.expiration_date, utc_today())
