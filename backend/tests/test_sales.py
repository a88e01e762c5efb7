import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gymdesk.models.member import Member
from gymdesk.models.payment import Payment, PaymentKind
from gymdesk.models.product import Product


def _sale(product: Product, quantity: int = 2, **extra) -> dict:
    return {"items": [{"product_id": str(product.id), "quantity": quantity}], "payment_method": "card", **extra}


@pytest.mark.asyncio
async def test_card_sale(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.post("/api/v1/sales", json=_sale(product), headers=cashier_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["subtotal"] == 20.0
    assert data["tax"] == 3.2
    assert data["total"] == 23.2
    assert data["change"] == 0
    assert data["items"][0]["product_name"] == "Water 1L"
    assert data["items"][0]["line_total"] == 20.0
    assert product.stock == 18


@pytest.mark.asyncio
async def test_cash_sale_with_change(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.post(
        "/api/v1/sales",
        json=_sale(product, payment_method="cash", cash_tendered=50),
        headers=cashier_headers,
    )
    assert response.status_code == 201
    assert response.json()["cash_tendered"] == 50.0
    assert response.json()["change"] == 26.8


@pytest.mark.asyncio
async def test_cash_sale_insufficient_cash(client: AsyncClient, cashier_headers: dict, product: Product):
    response = await client.post(
        "/api/v1/sales",
        json=_sale(product, payment_method="cash", cash_tendered=20),
        headers=cashier_headers,
    )
    assert response.status_code == 400
    assert product.stock == 20


@pytest.mark.asyncio
async def test_sale_uses_catalog_price(client: AsyncClient, cashier_headers: dict, product: Product):
    payload = _sale(product)
    payload["items"][0]["unit_price"] = 0.01
    response = await client.post("/api/v1/sales", json=payload, headers=cashier_headers)
    assert response.json()["items"][0]["unit_price"] == 10.0


@pytest.mark.asyncio
async def test_sale_merges_repeated_lines_for_stock_check(client: AsyncClient, cashier_headers: dict, product: Product):
    payload = {
        "items": [
            {"product_id": str(product.id), "quantity": 15},
            {"product_id": str(product.id), "quantity": 10},
        ],
        "payment_method": "card",
    }
    response = await client.post("/api/v1/sales", json=payload, headers=cashier_headers)
    assert response.status_code == 400
    assert "Insufficient stock" in response.json()["detail"]
    assert product.stock == 20


@pytest.mark.asyncio
async def test_sale_inactive_product(
    client: AsyncClient, cashier_headers: dict, db_session: AsyncSession, product: Product
):
    product.is_active = False
    await db_session.commit()
    response = await client.post("/api/v1/sales", json=_sale(product), headers=cashier_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_empty_cart_rejected(client: AsyncClient, cashier_headers: dict):
    response = await client.post(
        "/api/v1/sales", json={"items": [], "payment_method": "card"}, headers=cashier_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_sale_records_payment(
    client: AsyncClient, cashier_headers: dict, db_session: AsyncSession, product: Product, member: Member
):
    response = await client.post(
        "/api/v1/sales", json=_sale(product, member_id=str(member.id)), headers=cashier_headers
    )
    result = await db_session.execute(select(Payment).where(Payment.kind == PaymentKind.SALE))
    payment = result.scalar_one()
    assert str(payment.sale_id) == response.json()["id"]
    assert payment.amount == 23.2
    assert payment.member_id == member.id


@pytest.mark.asyncio
async def test_sales_today_and_reports(
    client: AsyncClient, cashier_headers: dict, auth_headers: dict, product: Product
):
    await client.post("/api/v1/sales", json=_sale(product), headers=cashier_headers)
    await client.post(
        "/api/v1/sales", json=_sale(product, quantity=1, payment_method="cash", cash_tendered=20),
        headers=cashier_headers,
    )

    today = await client.get("/api/v1/sales/today", headers=cashier_headers)
    assert today.status_code == 200
    data = today.json()
    assert data["count"] == 2
    assert data["total_amount"] == 34.8
    assert data["by_method"] == {"cash": 11.6, "card": 23.2, "transfer": 0.0}

    listed = await client.get("/api/v1/sales?payment_method=card", headers=auth_headers)
    assert listed.json()["total"] == 1
    assert listed.json()["total_amount"] == 23.2

    top = await client.get("/api/v1/sales/top-products", headers=auth_headers)
    assert top.json() == [
        {"product_id": str(product.id), "name": "Water 1L", "sku": "WATER-1L", "quantity_sold": 3, "revenue": 30.0}
    ]


@pytest.mark.asyncio
async def test_cashier_cannot_list_all_sales(client: AsyncClient, cashier_headers: dict):
    response = await client.get("/api/v1/sales", headers=cashier_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_sale(client: AsyncClient, cashier_headers: dict, product: Product):
    created = await client.post("/api/v1/sales", json=_sale(product), headers=cashier_headers)
    response = await client.get(f"/api/v1/sales/{created.json()['id']}", headers=cashier_headers)
    assert response.status_code == 200
    assert len(response.json()["items"]) == 1
