from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .base import Document, Money, coerce_id


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class Category(Document):
    id: str
    name: str

    @model_validator(mode="before")
    @classmethod
    def from_name(cls, data: Any) -> Any:
        # Categories used to be cached as bare names
        if isinstance(data, str):
            return {"id": data, "name": data}
        if isinstance(data, dict) and not data.get("id") and data.get("name"):
            return {**data, "id": data["name"]}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)


class Product(Document):
    id: str
    name: str
    price: Money = Decimal("0")
    cost_price: Money = Decimal("0")
    stock: int = Field(default=0, ge=0)
    category: str = ""
    min_stock: int = 5
    supplier: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)

    @property
    def status(self) -> StockStatus:
        if self.stock == 0:
            return StockStatus.OUT_OF_STOCK
        if self.stock <= self.min_stock:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK


class ProductCreate(BaseModel):
    name: str
    price: Decimal
    stock: int = 0
    category: str = ""
    cost_price: Decimal = Decimal("0")
    min_stock: int = 5
    supplier: str = ""


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    category: Optional[str] = None
    min_stock: Optional[int] = None
    supplier: Optional[str] = None
