from gymdesk.models.user import User, UserRole
from gymdesk.models.member import Member
from gymdesk.models.plan import MembershipPlan
from gymdesk.models.membership import Membership, PaymentMethod
from gymdesk.models.payment import Payment, PaymentKind
from gymdesk.models.attendance import Attendance
from gymdesk.models.product import Product
from gymdesk.models.sale import Sale, SaleItem
from gymdesk.models.machine import Machine, MachineCondition, MaintenanceKind, MaintenanceRecord
from gymdesk.models.audit_log import AuditAction, AuditLog, EntityType
from gymdesk.models.alert import Alert, AlertSeverity, AlertType
from gymdesk.models.setting import Setting

__all__ = [
    "User", "UserRole",
    "Member",
    "MembershipPlan",
    "Membership", "PaymentMethod",
    "Payment", "PaymentKind",
    "Attendance",
    "Product",
    "Sale", "SaleItem",
    "Machine", "MachineCondition", "MaintenanceKind", "MaintenanceRecord",
    "AuditAction", "AuditLog", "EntityType",
    "Alert", "AlertSeverity", "AlertType",
    "Setting",
]
