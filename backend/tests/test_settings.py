import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.db.seed import seed_defaults


@pytest.mark.asyncio
async def test_list_seeded_settings(client: AsyncClient, reception_headers: dict, db_session: AsyncSession):
    await seed_defaults(db_session)
    response = await client.get("/api/v1/settings", headers=reception_headers)
    assert response.status_code == 200
    keys = [s["key"] for s in response.json()]
    assert "gym_name" in keys
    assert "membership_alert_days" in keys

    single = await client.get("/api/v1/settings/currency", headers=reception_headers)
    assert single.json()["value"] == "$"


@pytest.mark.asyncio
async def test_update_setting(client: AsyncClient, auth_headers: dict):
    response = await client.put("/api/v1/settings/gym_name", json={"value": "Iron Temple"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["value"] == "Iron Temple"

    fetched = await client.get("/api/v1/settings/gym_name", headers=auth_headers)
    assert fetched.json()["value"] == "Iron Temple"


@pytest.mark.asyncio
async def test_update_setting_requires_configure_system(client: AsyncClient, reception_headers: dict):
    response = await client.put("/api/v1/settings/gym_name", json={"value": "Mine"}, headers=reception_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_setting(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/v1/settings/nope", headers=auth_headers)
    assert response.status_code == 404
