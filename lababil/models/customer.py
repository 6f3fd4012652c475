from typing import Any, Optional

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .base import Document, coerce_id


class Customer(Document):
    # Keep whatever extra contact fields the front-end stored
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = None
    name: str
    phone: str = ""
    email: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_id(value)
