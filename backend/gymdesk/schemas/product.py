import enum
import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    price: float = Field(gt=0)
    cost: float | None = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    expiration_date: date | None = None
    supplier: str | None = None
    image_url: str | None = None


class ProductUpdate(BaseModel):
    sku: str | None = Field(None, min_length=1, max_length=100)
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    price: float | None = Field(None, gt=0)
    cost: float | None = Field(None, ge=0)
    min_stock: int | None = Field(None, ge=0)
    expiration_date: date | None = None
    supplier: str | None = None
    image_url: str | None = None
    is_active: bool | None = None


class StockOperation(str, enum.Enum):
    ADD = "add"
    SUBTRACT = "subtract"


class StockAdjustment(BaseModel):
    quantity: int = Field(gt=0)
    operation: StockOperation = StockOperation.ADD


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sku: str
    name: str
    description: str | None = None
    category: str | None = None
    price: float
    cost: float | None = None
    stock: int
    min_stock: int
    expiration_date: date | None = None
    supplier: str | None = None
    image_url: str | None = None
    is_active: bool
    created_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
