from decimal import Decimal
from typing import Annotated, Any, Dict, Union

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def _money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal in memory, plain JSON number in documents and snapshots
Money = Annotated[Decimal, PlainSerializer(_money_to_json, return_type=Union[int, float], when_used="json")]


def coerce_id(value: Any) -> Any:
    """Older snapshots stored numeric ids"""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class Document(BaseModel):
    """Entity stored as a camelCase document remotely and in the cache"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
