from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.db.base import utc_today
from gymdesk.models.member import Member
from gymdesk.models.membership import Membership, PaymentMethod
from gymdesk.models.payment import Payment
from gymdesk.models.plan import MembershipPlan
from gymdesk.rules.dates import DurationUnit, add_duration


async def _assign(client: AsyncClient, headers: dict, member: Member, plan: MembershipPlan, path: str = "", **extra):
    return await client.post(
        f"/api/v1/memberships{path}",
        json={"member_id": str(member.id), "plan_id": str(plan.id), **extra},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_assign_membership_starts_today(
    client: AsyncClient, reception_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    response = await _assign(client, reception_headers, member, monthly_plan)
    assert response.status_code == 201
    data = response.json()
    today = utc_today()
    assert data["start_date"] == today.isoformat()
    assert data["expiration_date"] == add_duration(today, 1, "months").isoformat()
    assert data["amount_paid"] == 80.0
    assert data["status"] == "active"
    assert data["plan_name"] == "Monthly"
    assert data["member_code"] == "M0001"


@pytest.mark.asyncio
async def test_assign_with_explicit_start_clamps_month_end(
    client: AsyncClient, reception_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    response = await _assign(client, reception_headers, member, monthly_plan, start_date="2024-01-31")
    assert response.status_code == 201
    assert response.json()["expiration_date"] == "2024-02-29"
    assert response.json()["status"] == "expired"


@pytest.mark.asyncio
async def test_assign_records_payment(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    response = await _assign(
        client, reception_headers, member, monthly_plan, amount_paid=70, payment_method="card"
    )
    result = await db_session.execute(select(Payment).where(Payment.member_id == member.id))
    payment = result.scalar_one()
    assert str(payment.membership_id) == response.json()["id"]
    assert payment.amount == 70.0
    assert payment.method == PaymentMethod.CARD
    assert payment.kind.value == "membership"


@pytest.mark.asyncio
async def test_new_membership_supersedes_previous(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    first = await _assign(client, reception_headers, member, monthly_plan)
    second = await _assign(client, reception_headers, member, monthly_plan)
    assert second.status_code == 201

    result = await db_session.execute(select(Membership).where(Membership.member_id == member.id))
    by_id = {str(m.id): m for m in result.scalars().all()}
    assert by_id[first.json()["id"]].is_active is False
    assert by_id[second.json()["id"]].is_active is True


@pytest.mark.asyncio
async def test_renewal_continues_after_current_expiration(
    client: AsyncClient, reception_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    first = await _assign(client, reception_headers, member, monthly_plan)
    current_expiration = date.fromisoformat(first.json()["expiration_date"])

    response = await _assign(client, reception_headers, member, monthly_plan, path="/renew")
    assert response.status_code == 201
    start = current_expiration + timedelta(days=1)
    assert response.json()["start_date"] == start.isoformat()
    assert response.json()["expiration_date"] == add_duration(start, 1, "months").isoformat()


@pytest.mark.asyncio
async def test_renewal_of_lapsed_membership_starts_today(
    client: AsyncClient, reception_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    await _assign(client, reception_headers, member, monthly_plan, start_date="2020-01-01")
    response = await _assign(client, reception_headers, member, monthly_plan, path="/renew")
    assert response.json()["start_date"] == utc_today().isoformat()


@pytest.mark.asyncio
async def test_assign_to_inactive_member(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    member.is_active = False
    await db_session.commit()
    response = await _assign(client, reception_headers, member, monthly_plan)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_assign_inactive_plan(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    monthly_plan.is_active = False
    await db_session.commit()
    response = await _assign(client, reception_headers, member, monthly_plan)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cashier_cannot_assign(
    client: AsyncClient, cashier_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    response = await _assign(client, cashier_headers, member, monthly_plan)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_expiring_and_expired_lists(
    client: AsyncClient, reception_headers: dict, db_session: AsyncSession, member: Member, monthly_plan: MembershipPlan
):
    other = Member(code="M0002", first_name="Bruno", last_name="Diaz")
    db_session.add(other)
    await db_session.commit()

    weekly = MembershipPlan(name="Weekly", duration=7, duration_unit=DurationUnit.DAYS, price=25)
    db_session.add(weekly)
    await db_session.commit()

    # expires in four days
    start = utc_today() - timedelta(days=3)
    await _assign(client, reception_headers, member, weekly, start_date=start.isoformat())
    await _assign(client, reception_headers, other, monthly_plan, start_date="2020-01-01")

    expiring = await client.get("/api/v1/memberships/expiring?days=7", headers=reception_headers)
    assert expiring.status_code == 200
    assert [m["member_code"] for m in expiring.json()["memberships"]] == ["M0001"]

    expired = await client.get("/api/v1/memberships/expired", headers=reception_headers)
    assert [m["member_code"] for m in expired.json()["memberships"]] == ["M0002"]


@pytest.mark.asyncio
async def test_get_membership(
    client: AsyncClient, reception_headers: dict, member: Member, monthly_plan: MembershipPlan
):
    created = await _assign(client, reception_headers, member, monthly_plan)
    response = await client.get(f"/api/v1/memberships/{created.json()['id']}", headers=reception_headers)
    assert response.status_code == 200
    assert response.json()["member_name"] == "Ana Lopez"
