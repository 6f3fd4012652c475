"""In-memory dashboard state and its reconciliation with the stores.

``DomainState`` is the single read model every API surface reads from and
the write target of every transaction. Each mutation goes through
``mutate`` so memory and the local cache move together.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.notifier import ChangeNotifier, StateChange
from ..core.repository import CacheRepository, RemoteRepository, load_with_fallback
from ..models.customer import Customer
from ..models.inventory import Category, Product
from ..models.settings import StoreSettings
from ..models.transaction import Purchase, Sale
from .local_cache import LocalCache
from .remote_store import RemoteStore

logger = logging.getLogger(__name__)

COLLECTIONS = ("categories", "products", "sales", "purchases", "customers", "settings")
DEFAULT_CATEGORIES = ["Electronics", "Clothing", "Books", "Home & Garden", "Sports"]

ENTITY_MODELS: Dict[str, Type[BaseModel]] = {
    "categories": Category,
    "products": Product,
    "sales": Sale,
    "purchases": Purchase,
    "customers": Customer,
}


def check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection {collection!r}")


def parse_records(collection: str, records: Iterable[Any]) -> List[Any]:
    """Validate records into entities, skipping the malformed ones"""
    model = ENTITY_MODELS[collection]
    entities = []
    for record in records:
        try:
            entities.append(model.model_validate(record))
        except PydanticValidationError as e:
            logger.warning("Skipping malformed %s record: %s", collection, e.errors()[0]["msg"])
    return entities


def order_collection(collection: str, entities: List[Any]) -> List[Any]:
    if collection in ("sales", "purchases"):
        return sorted(entities, key=lambda record: record.date, reverse=True)
    if collection in ("categories", "customers"):
        return sorted(entities, key=lambda record: record.name.lower())
    return list(entities)


def default_categories() -> List[Category]:
    return [Category(id=name, name=name) for name in DEFAULT_CATEGORIES]


class DomainState:
    def __init__(self, store: RemoteStore, cache: LocalCache, notifier: ChangeNotifier):
        self.store = store
        self.cache = cache
        self.notifier = notifier
        self.remote = RemoteRepository(store)
        self.local = CacheRepository(cache)

        self.categories: List[Category] = []
        self.products: List[Product] = []
        self.sales: List[Sale] = []
        self.purchases: List[Purchase] = []
        self.customers: List[Customer] = []
        self.settings = StoreSettings()

        # Held from validation to the in-memory update of any write that reads stock
        self.write_lock = asyncio.Lock()

    # Loading
    async def load(self, collection: str) -> Any:
        """Load one collection from the remote store, falling back to the cache"""
        check_collection(collection)
        outcome = await load_with_fallback(collection, self.remote, self.local)

        if collection == "settings":
            self.settings = self._merge_settings(self.settings, outcome.records)
        else:
            entities = parse_records(collection, outcome.records)
            if collection == "categories" and not entities:
                entities = default_categories()
            setattr(self, collection, order_collection(collection, entities))

        if outcome.source == self.remote.name:
            # Cache for offline
            self.cache.write_collection(collection, self.dump(collection))
            self._refresh_snapshot(collection)

        logger.info("Loaded %s from %s", collection, outcome.source)
        return getattr(self, collection)

    async def load_all(self) -> None:
        await asyncio.gather(*(self.load(collection) for collection in COLLECTIONS))

    def _refresh_snapshot(self, collection: str) -> None:
        """Update one collection inside the whole-state blob peers read"""
        snapshot = self.cache.read_snapshot()
        if not isinstance(snapshot, dict):
            snapshot = {}
        snapshot[collection] = self.dump(collection)
        self.cache.write_snapshot(snapshot)

    @staticmethod
    def _merge_settings(current: StoreSettings, records: List[Any]) -> StoreSettings:
        if not records or not isinstance(records[0], dict):
            return current
        try:
            return StoreSettings.model_validate({**current.to_document(), **records[0]})
        except PydanticValidationError:
            logger.warning("Ignoring malformed settings document")
            return current

    # Lookups
    def find_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == str(product_id)), None)

    def find_product_by_name(self, name: str) -> Optional[Product]:
        return next((p for p in self.products if p.name == name), None)

    def find_sale(self, sale_id: str) -> Optional[Sale]:
        return next((s for s in self.sales if s.id == str(sale_id)), None)

    def transaction_ids(self) -> List[str]:
        return [s.id for s in self.sales] + [p.id for p in self.purchases]

    # Serialization
    def dump(self, collection: str) -> Any:
        check_collection(collection)
        if collection == "settings":
            return self.settings.to_document()
        return [entity.to_document() for entity in getattr(self, collection)]

    def to_snapshot(self) -> Dict[str, Any]:
        return {collection: self.dump(collection) for collection in COLLECTIONS}

    # Mutation
    def mutate(self, operation: Callable[[], Any], *collections: str) -> Any:
        """Apply an in-memory change and flush the touched collections"""
        for collection in collections:
            check_collection(collection)
        result = operation()
        self.flush(collections)
        return result

    def flush(self, collections: Iterable[str] = ()) -> None:
        touched = list(collections) or list(COLLECTIONS)
        for collection in touched:
            self.cache.write_collection(collection, self.dump(collection))
        self.cache.write_snapshot(self.to_snapshot())
        self.notifier.publish(touched)

    def replace(self, entities: Dict[str, Any]) -> None:
        """Swap whole collections at once (import, peer sync)"""
        for collection, value in entities.items():
            check_collection(collection)
            setattr(self, collection, value)

    # Cross-process sync
    def apply_peer_snapshot(self, payload: Any = None) -> List[str]:
        """Adopt the whole-state blob another process flushed to the cache"""
        if payload is None:
            payload = self.cache.read_snapshot()
        if not isinstance(payload, dict):
            logger.warning("Sync error: cached state blob is missing or malformed")
            return []

        updates: Dict[str, Any] = {}
        for collection in COLLECTIONS:
            value = payload.get(collection)
            if collection == "settings":
                if isinstance(value, dict):
                    updates[collection] = self._merge_settings(self.settings, [value])
            elif isinstance(value, list):
                updates[collection] = parse_records(collection, value)

        self.replace(updates)
        applied = list(updates)
        if applied:
            self.notifier.notify_local(StateChange(collections=applied, origin="peer"))
            logger.info("Data synced from another process: %s", ", ".join(applied))
        return applied

    def sync_from_peers(self) -> bool:
        changes = self.notifier.poll_peers()
        if not changes:
            return False
        return bool(self.apply_peer_snapshot())
