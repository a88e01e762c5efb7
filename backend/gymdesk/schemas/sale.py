import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from gymdesk.models.membership import PaymentMethod


class SaleItemIn(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(gt=0)


class SaleCreate(BaseModel):
    items: list[SaleItemIn] = Field(min_length=1)
    payment_method: PaymentMethod
    cash_tendered: float | None = Field(None, ge=0)
    member_id: uuid.UUID | None = None
    notes: str | None = None


class SaleItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    member_id: uuid.UUID | None = None
    subtotal: float
    tax: float
    total: float
    payment_method: PaymentMethod
    cash_tendered: float | None = None
    change: float
    notes: str | None = None
    sold_by: uuid.UUID | None = None
    created_at: datetime
    items: list[SaleItemResponse] = []


class SaleListResponse(BaseModel):
    sales: list[SaleResponse]
    total: int
    total_amount: float


class TodaySalesResponse(BaseModel):
    date: date
    count: int
    total_amount: float
    by_method: dict[str, float]
    sales: list[SaleResponse]


class TopProduct(BaseModel):
    product_id: uuid.UUID
    name: str
    sku: str
    quantity_sold: int
    revenue: float
