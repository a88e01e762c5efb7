from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.db.base import utc_today
from gymdesk.models.machine import Machine
from gymdesk.models.member import Member
from gymdesk.models.membership import Membership, PaymentMethod
from gymdesk.models.plan import MembershipPlan
from gymdesk.models.product import Product


async def _seed_alert_sources(db: AsyncSession, member: Member, plan: MembershipPlan) -> None:
    today = utc_today()
    db.add_all([
        Membership(
            member=member, plan=plan, start_date=today - timedelta(days=29),
            expiration_date=today + timedelta(days=1), amount_paid=80.0,
            payment_method=PaymentMethod.CASH, is_active=True,
        ),
        Product(sku="GEL-1", name="Energy gel", price=25, stock=0, min_stock=3),
        Product(sku="MILK", name="Milk", price=20, stock=50, expiration_date=today + timedelta(days=5)),
        Machine(code="TR-01", name="Treadmill", next_maintenance=today - timedelta(days=2)),
    ])
    await db.commit()


@pytest.mark.asyncio
async def test_create_and_list_alerts(client: AsyncClient, reception_headers: dict):
    response = await client.post(
        "/api/v1/alerts",
        json={"title": "Shower leak", "message": "Men's locker room, shower 3", "severity": "warning"},
        headers=reception_headers,
    )
    assert response.status_code == 201
    assert response.json()["alert_type"] == "manual"
    assert response.json()["is_read"] is False

    listed = await client.get("/api/v1/alerts", headers=reception_headers)
    assert listed.status_code == 200
    assert listed.json()["total"] == 1
    assert listed.json()["unread_count"] == 1


@pytest.mark.asyncio
async def test_generate_alerts(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    await _seed_alert_sources(db_session, member, monthly_plan)

    response = await client.post("/api/v1/alerts/generate", headers=reception_headers)
    assert response.status_code == 200
    assert response.json() == {
        "membership_expiring": 1,
        "low_stock": 1,
        "product_expiring": 1,
        "maintenance_due": 1,
        "total": 4,
    }

    alerts = (await client.get("/api/v1/alerts", headers=reception_headers)).json()["alerts"]
    severities = {a["alert_type"]: a["severity"] for a in alerts}
    assert severities == {
        "membership_expiring": "critical",
        "low_stock": "critical",
        "product_expiring": "warning",
        "maintenance_due": "critical",
    }


@pytest.mark.asyncio
async def test_generate_alerts_skips_existing_unread(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    await _seed_alert_sources(db_session, member, monthly_plan)
    await client.post("/api/v1/alerts/generate", headers=reception_headers)

    again = await client.post("/api/v1/alerts/generate", headers=reception_headers)
    assert again.json()["total"] == 0

    await client.patch("/api/v1/alerts/read-all", headers=reception_headers)
    after_read = await client.post("/api/v1/alerts/generate", headers=reception_headers)
    assert after_read.json()["total"] == 4


@pytest.mark.asyncio
async def test_mark_read_and_delete(client: AsyncClient, reception_headers: dict):
    created = await client.post(
        "/api/v1/alerts", json={"title": "One", "message": "First"}, headers=reception_headers
    )
    await client.post("/api/v1/alerts", json={"title": "Two", "message": "Second"}, headers=reception_headers)
    alert_id = created.json()["id"]

    read = await client.patch(f"/api/v1/alerts/{alert_id}/read", headers=reception_headers)
    assert read.status_code == 200
    assert read.json()["is_read"] is True

    count = await client.get("/api/v1/alerts/unread-count", headers=reception_headers)
    assert count.json() == {"unread_count": 1}

    unread_only = await client.get("/api/v1/alerts?is_read=false", headers=reception_headers)
    assert [a["title"] for a in unread_only.json()["alerts"]] == ["Two"]

    purged = await client.delete("/api/v1/alerts/read", headers=reception_headers)
    assert purged.json() == {"deleted": 1}

    remaining = await client.get("/api/v1/alerts", headers=reception_headers)
    assert remaining.json()["total"] == 1

    other_id = remaining.json()["alerts"][0]["id"]
    deleted = await client.delete(f"/api/v1/alerts/{other_id}", headers=reception_headers)
    assert deleted.status_code == 204

    missing = await client.delete(f"/api/v1/alerts/{other_id}", headers=reception_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client: AsyncClient, reception_headers: dict):
    for title in ("A", "B", "C"):
        await client.post("/api/v1/alerts", json={"title": title, "message": "x"}, headers=reception_headers)
    response = await client.patch("/api/v1/alerts/read-all", headers=reception_headers)
    assert response.json() == {"updated": 3}
    count = await client.get("/api/v1/alerts/unread-count", headers=reception_headers)
    assert count.json()["unread_count"] == 0


@pytest.mark.asyncio
async def test_alerts_require_auth(client: AsyncClient):
    response = await client.get("/api/v1/alerts")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_generate_alert_severity_boundaries(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession
):
    today = utc_today()
    db_session.add_all([
        Product(sku="BAR-1", name="Protein bar", price=30, stock=2, min_stock=3),
        Product(sku="YOG-1", name="Yogurt", price=15, stock=40, expiration_date=today),
        Product(sku="JUICE", name="Juice", price=18, stock=40, expiration_date=today - timedelta(days=1)),
        Machine(code="BK-01", name="Bike", next_maintenance=today),
    ])
    await db_session.commit()

    response = await client.post("/api/v1/alerts/generate", headers=reception_headers)
    assert response.json()["total"] == 4

    alerts = (await client.get("/api/v1/alerts", headers=reception_headers)).json()["alerts"]
    severities = {a["title"]: a["severity"] for a in alerts}
    assert severities == {
        "Low stock: Protein bar": "warning",
        "Expiring product: Yogurt": "warning",
        "Expired product: Juice": "critical",
        "Maintenance due: Bike": "info",
    }
