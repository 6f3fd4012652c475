from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import Document, Money


class StoreSettings(Document):
    """Per-tenant dashboard settings (singleton)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    company_name: str = "Lababil Solution"
    tax_rate: Money = Field(default=Decimal("11"), ge=0, le=100)
    low_stock_threshold: int = 10
    currency: str = "IDR"
    dark_mode: bool = False


class SettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    tax_rate: Optional[Decimal] = None
    low_stock_threshold: Optional[int] = None
    currency: Optional[str] = None
    dark_mode: Optional[bool] = None
