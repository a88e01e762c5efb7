import pytest
from httpx import AsyncClient

from gymdesk.models.member import Member


@pytest.mark.asyncio
async def test_record_and_list_payments(client: AsyncClient, auth_headers: dict, reception_headers: dict, member: Member):
    created = await client.post(
        "/api/v1/payments",
        json={"member_id": str(member.id), "concept": "Locker rental", "amount": 150, "method": "transfer"},
        headers=reception_headers,
    )
    assert created.status_code == 201
    assert created.json()["kind"] == "other"

    await client.post(
        "/api/v1/payments",
        json={"concept": "Towel", "amount": 20},
        headers=reception_headers,
    )

    listed = await client.get("/api/v1/payments", headers=auth_headers)
    assert listed.status_code == 200
    assert listed.json()["total"] == 2
    assert listed.json()["total_amount"] == 170.0

    by_member = await client.get(f"/api/v1/payments?member_id={member.id}", headers=auth_headers)
    assert by_member.json()["total"] == 1

    by_method = await client.get("/api/v1/payments?method=cash", headers=auth_headers)
    assert by_method.json()["total_amount"] == 20.0

    detail = await client.get(f"/api/v1/payments/{created.json()['id']}", headers=auth_headers)
    assert detail.json()["concept"] == "Locker rental"


@pytest.mark.asyncio
async def test_payment_amount_must_be_positive(client: AsyncClient, reception_headers: dict):
    response = await client.post(
        "/api/v1/payments", json={"concept": "Nothing", "amount": 0}, headers=reception_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reception_cannot_read_financials(client: AsyncClient, reception_headers: dict):
    response = await client.get("/api/v1/payments", headers=reception_headers)
    assert response.status_code == 403
