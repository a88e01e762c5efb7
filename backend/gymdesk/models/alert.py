import enum

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gymdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, enum_column


class AlertSeverity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(str, enum.Enum):
    MEMBERSHIP_EXPIRING = "membership_expiring"
    LOW_STOCK = "low_stock"
    PRODUCT_EXPIRING = "product_expiring"
    MAINTENANCE_DUE = "maintenance_due"
    MANUAL = "manual"


class Alert(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "alerts"

    alert_type: Mapped[AlertType] = mapped_column(enum_column(AlertType, "alert_type"), nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        enum_column(AlertSeverity, "alert_severity"), default=AlertSeverity.INFO, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
