from datetime import date as Date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .base import Document, Money, coerce_id


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    VOIDED = "voided"


class SaleItem(Document):
    product_id: str
    name: str
    qty: int = Field(gt=0)
    price: Money

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.qty


class Sale(Document):
    id: str
    date: Date
    customer: str
    phone: str = ""
    items: List[SaleItem]
    total: Money
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: Optional[datetime] = None
    created_by: str = "Unknown"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)


class PurchaseItem(Document):
    product_id: str
    name: str
    qty: int = Field(gt=0)
    cost_price: Money

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)

    @property
    def line_total(self) -> Decimal:
        return self.cost_price * self.qty


class Purchase(Document):
    id: str
    date: Date
    supplier: str
    phone: str = ""
    items: List[PurchaseItem]
    total_items: int
    total_cost: Money
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: Optional[datetime] = None
    created_by: str = "Unknown"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)


# Requests are deliberately loose; the transaction service validates them
# and answers with a readable reason.
class SaleLineRequest(BaseModel):
    product_id: str
    qty: int
    price: Optional[Decimal] = None


class SaleRequest(BaseModel):
    customer: str
    phone: str = ""
    items: List[SaleLineRequest] = []


class PurchaseLineRequest(BaseModel):
    product_id: str
    qty: int
    cost_price: Decimal


class PurchaseRequest(BaseModel):
    supplier: str
    phone: str = ""
    items: List[PurchaseLineRequest] = []
