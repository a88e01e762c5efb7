from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.db.base import utc_today
from gymdesk.models.product import Product


@pytest.mark.asyncio
async def test_create_product(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        "/api/v1/products",
        json={"sku": "PROT-500", "name": "Whey 500g", "category": "supplements", "price": 350, "stock": 12},
        headers=cashier_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["sku"] == "PROT-500"
    assert data["min_stock"] == 5
    assert data["stock"] == 12


@pytest.mark.asyncio
async def test_create_product_duplicate_sku(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.post(
        "/api/v1/products",
        json={"sku": product.sku, "name": "Another water", "price": 12},
        headers=cashier_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_product_requires_positive_price(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        "/api/v1/products",
        json={"sku": "FREE", "name": "Freebie", "price": 0},
        headers=cashier_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reception_cannot_manage_inventory(client: AsyncClient, reception_headers: dict, product: Product):
    listed = await client.get("/api/v1/products", headers=reception_headers)
    assert listed.status_code == 200

    response = await client.patch(
        f"/api/v1/products/{product.id}/stock",
        json={"quantity": 5, "operation": "add"},
        headers=reception_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_lookup_by_sku(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.get("/api/v1/products/code/WATER-1L", headers=cashier_headers)
    assert response.status_code == 200
    assert response.json()["id"] == str(product.id)

    missing = await client.get("/api/v1/products/code/NOPE", headers=cashier_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_adjust_stock(client: AsyncClient, cashier_headers: dict, product: Product):
    added = await client.patch(
        f"/api/v1/products/{product.id}/stock",
        json={"quantity": 5, "operation": "add"},
        headers=cashier_headers,
    )
    assert added.status_code == 200
    assert added.json()["stock"] == 25

    subtracted = await client.patch(
        f"/api/v1/products/{product.id}/stock",
        json={"quantity": 25, "operation": "subtract"},
        headers=cashier_headers,
    )
    assert subtracted.json()["stock"] == 0


@pytest.mark.asyncio
async def test_stock_never_goes_negative(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.patch(
        f"/api/v1/products/{product.id}/stock",
        json={"quantity": 21, "operation": "subtract"},
        headers=cashier_headers,
    )
    assert response.status_code == 400
    assert product.stock == 20


@pytest.mark.asyncio
async def test_low_stock_and_filters(client: AsyncClient, cashier_headers: dict, db_session: AsyncSession, product: Product):
    db_session.add_all([
        Product(sku="BAR-1", name="Protein bar", category="snacks", price=30, stock=5, min_stock=5),
        Product(sku="GEL-1", name="Energy gel", category="snacks", price=25, stock=0, min_stock=3),
    ])
    await db_session.commit()

    low = await client.get("/api/v1/products/low-stock", headers=cashier_headers)
    assert [p["sku"] for p in low.json()["products"]] == ["GEL-1", "BAR-1"]

    flagged = await client.get("/api/v1/products?low_stock=true", headers=cashier_headers)
    assert flagged.json()["total"] == 2

    snacks = await client.get("/api/v1/products?category=snacks&search=bar", headers=cashier_headers)
    assert [p["sku"] for p in snacks.json()["products"]] == ["BAR-1"]

    categories = await client.get("/api/v1/products/categories", headers=cashier_headers)
    assert categories.json() == ["drinks", "snacks"]


@pytest.mark.asyncio
async def test_expiring_products(client: AsyncClient, cashier_headers: dict, db_session: AsyncSession):
    today = utc_today()
    db_session.add_all([
        Product(sku="MILK", name="Milk", price=20, stock=10, expiration_date=today + timedelta(days=3)),
        Product(sku="OLD", name="Old yogurt", price=15, stock=10, expiration_date=today - timedelta(days=2)),
        Product(sku="RICE", name="Rice cakes", price=18, stock=10, expiration_date=today + timedelta(days=90)),
    ])
    await db_session.commit()

    response = await client.get("/api/v1/products/expiring", headers=cashier_headers)
    assert [p["sku"] for p in response.json()["products"]] == ["OLD", "MILK"]

    wider = await client.get("/api/v1/products/expiring?days=100", headers=cashier_headers)
    assert wider.json()["total"] == 3


@pytest.mark.asyncio
async def test_update_and_delete_product(client: AsyncClient, cashier_headers: dict, product: Product):
    updated = await client.put(f"/api/v1/products/{product.id}", json={"price": 12.5}, headers=cashier_headers)
    assert updated.status_code == 200
    assert updated.json()["price"] == 12.5

    deleted = await client.delete(f"/api/v1/products/{product.id}", headers=cashier_headers)
    assert deleted.status_code == 204
    listed = await client.get("/api/v1/products", headers=cashier_headers)
    assert listed.json()["total"] == 0
