from fastapi import APIRouter

from gymdesk.api.v1.alerts import router as alerts_router
from gymdesk.api.v1.attendance import router as attendance_router
from gymdesk.api.v1.audit import router as audit_router
from gymdesk.api.v1.auth import router as auth_router
from gymdesk.api.v1.dashboard import router as dashboard_router
from gymdesk.api.v1.machines import router as machines_router
from gymdesk.api.v1.members import router as members_router
from gymdesk.api.v1.memberships import router as memberships_router
from gymdesk.api.v1.payments import router as payments_router
from gymdesk.api.v1.plans import router as plans_router
from gymdesk.api.v1.products import router as products_router
from gymdesk.api.v1.sales import router as sales_router
from gymdesk.api.v1.settings import router as settings_router
from gymdesk.api.v1.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(audit_router)
router.include_router(members_router)
router.include_router(plans_router)
router.include_router(memberships_router)
router.include_router(payments_router)
router.include_router(attendance_router)
router.include_router(products_router)
router.include_router(sales_router)
router.include_router(machines_router)
router.include_router(alerts_router)
router.include_router(dashboard_router)
router.include_router(settings_router)
