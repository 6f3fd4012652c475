"""Remote document store adapters.

Every collection (products, sales, purchases, ...) maps to one table of the
remote store and every document to one row keyed by ``id``. Adapters never
raise: failures come back as ``StoreResult(success=False, error=...)``.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from supabase import AsyncClient

logger = logging.getLogger(__name__)

# Query operators understood by query_by_field, mapped to postgrest filters
OPERATORS = {
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
    "in": "in_",
}


class StoreResult(BaseModel):
    success: bool
    data: List[Dict[str, Any]] = []
    error: Optional[str] = None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RemoteStore(ABC):
    """Contract the dashboard core depends on"""

    @abstractmethod
    async def create_with_id(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        ...

    @abstractmethod
    async def read_all(self, collection: str) -> StoreResult:
        ...

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> StoreResult:
        ...

    @abstractmethod
    async def query_by_field(self, collection: str, field: str, operator: str, value: Any) -> StoreResult:
        ...


class SupabaseStore(RemoteStore):
    def __init__(self, client: AsyncClient):
        self.client = client

    async def create_with_id(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        document = {**data, "id": str(doc_id), "updatedAt": _timestamp()}
        try:
            await self.client.table(collection).upsert(document).execute()
            return StoreResult(success=True, data=[document])
        except Exception as e:
            logger.error("Error adding document to %s: %s", collection, e)
            return StoreResult(success=False, error=str(e))

    async def read_all(self, collection: str) -> StoreResult:
        try:
            response = await self.client.table(collection).select("*").execute()
            return StoreResult(success=True, data=response.data or [])
        except Exception as e:
            logger.error("Error fetching documents from %s: %s", collection, e)
            return StoreResult(success=False, error=str(e))

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        changes = {**data, "updatedAt": _timestamp()}
        try:
            response = await self.client.table(collection).update(changes).eq("id", str(doc_id)).execute()
            if not response.data:
                return StoreResult(success=False, error=f"Document {doc_id} not found in {collection}")
            return StoreResult(success=True, data=response.data)
        except Exception as e:
            logger.error("Error updating document in %s: %s", collection, e)
            return StoreResult(success=False, error=str(e))

    async def delete(self, collection: str, doc_id: str) -> StoreResult:
        try:
            await self.client.table(collection).delete().eq("id", str(doc_id)).execute()
            return StoreResult(success=True)
        except Exception as e:
            logger.error("Error deleting document from %s: %s", collection, e)
            return StoreResult(success=False, error=str(e))

    async def query_by_field(self, collection: str, field: str, operator: str, value: Any) -> StoreResult:
        method = OPERATORS.get(operator)
        if method is None:
            return StoreResult(success=False, error=f"Unsupported operator {operator!r}")
        try:
            query = self.client.table(collection).select("*")
            response = await getattr(query, method)(field, value).execute()
            return StoreResult(success=True, data=response.data or [])
        except Exception as e:
            logger.error("Error querying %s: %s", collection, e)
            return StoreResult(success=False, error=str(e))


class UnconfiguredStore(RemoteStore):
    """Stand-in used when no remote store credentials are set.

    Reads report failure so every load falls back to the local cache, and
    writes report failure so no transaction is committed without a durable
    remote record.
    """

    ERROR = "Remote store is not configured"

    async def create_with_id(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        return StoreResult(success=False, error=self.ERROR)

    async def read_all(self, collection: str) -> StoreResult:
        return StoreResult(success=False, error=self.ERROR)

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> StoreResult:
        return StoreResult(success=False, error=self.ERROR)

    async def delete(self, collection: str, doc_id: str) -> StoreResult:
        return StoreResult(success=False, error=self.ERROR)

    async def query_by_field(self, collection: str, field: str, operator: str, value: Any) -> StoreResult:
        return StoreResult(success=False, error=self.ERROR)
