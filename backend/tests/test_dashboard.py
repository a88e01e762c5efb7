from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.db.base import utc_today
from gymdesk.models.member import Member
from gymdesk.models.membership import PaymentMethod
from gymdesk.models.payment import Payment, PaymentKind
from gymdesk.models.plan import MembershipPlan
from gymdesk.models.product import Product
from gymdesk.services.dashboard_service import RevenueGrouping, period_label


def test_period_labels():
    day = date(2024, 3, 9)
    assert period_label(day, RevenueGrouping.DAY) == "2024-03-09"
    assert period_label(day, RevenueGrouping.MONTH) == "2024-03"
    assert period_label(day, RevenueGrouping.YEAR) == "2024"


@pytest.mark.asyncio
async def test_dashboard_summary(
    client: AsyncClient,
    auth_headers: dict,
    reception_headers: dict,
    member: Member,
    monthly_plan: MembershipPlan,
    product: Product,
):
    await client.post(
        "/api/v1/memberships",
        json={"member_id": str(member.id), "plan_id": str(monthly_plan.id)},
        headers=reception_headers,
    )
    await client.post("/api/v1/attendance/check-in", json={"code": member.code}, headers=reception_headers)
    await client.post(
        "/api/v1/sales",
        json={"items": [{"product_id": str(product.id), "quantity": 1}], "payment_method": "card"},
        headers=reception_headers,
    )

    response = await client.get("/api/v1/dashboard", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["date"] == utc_today().isoformat()
    assert data["active_members"] == 1
    assert data["members_with_active_membership"] == 1
    assert data["attendance_today"] == 1
    assert data["sales_today"] == 1
    assert data["sales_revenue_today"] == 11.6
    assert data["revenue_this_month"] == 91.6
    assert data["low_stock_products"] == 0
    assert data["unread_alerts"] == 0


@pytest.mark.asyncio
async def test_dashboard_requires_financials(client: AsyncClient, reception_headers: dict):
    response = await client.get("/api/v1/dashboard", headers=reception_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_revenue_report(client: AsyncClient, auth_headers: dict, db_session: AsyncSession):
    db_session.add_all([
        Payment(kind=PaymentKind.MEMBERSHIP, concept="Monthly", amount=80, method=PaymentMethod.CASH),
        Payment(kind=PaymentKind.SALE, concept="Sale", amount=23.2, method=PaymentMethod.CARD),
        Payment(kind=PaymentKind.OTHER, concept="Locker", amount=50, method=PaymentMethod.CARD),
    ])
    await db_session.commit()

    response = await client.get("/api/v1/dashboard/revenue?group_by=month", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["group_by"] == "month"
    assert data["total"] == 153.2
    assert len(data["series"]) == 1
    assert data["series"][0]["count"] == 3
    assert data["by_kind"] == {"membership": 80.0, "sale": 23.2, "other": 50.0}
    assert data["by_method"] == {"cash": 80.0, "card": 73.2}


@pytest.mark.asyncio
async def test_revenue_report_range(client: AsyncClient, auth_headers: dict):
    today = utc_today()
    response = await client.get(
        f"/api/v1/dashboard/revenue?start_date={today}&end_date={today - timedelta(days=1)}",
        headers=auth_headers,
    )
    assert response.status_code == 400

    empty = await client.get("/api/v1/dashboard/revenue?start_date=2020-01-01&end_date=2020-01-31", headers=auth_headers)
    assert empty.json()["total"] == 0
    assert empty.json()["series"] == []
