"""Where collections are read from.

Two repositories: the remote document store (source of truth) and the local
cache (offline copy). ``load_with_fallback`` is the single policy deciding
which one a load is served from.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..services.local_cache import LocalCache
from ..services.remote_store import RemoteStore

logger = logging.getLogger(__name__)


class Repository(ABC):
    name = "repository"

    @abstractmethod
    async def fetch(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        """Records of a collection, or None when the source is unavailable"""


class RemoteRepository(Repository):
    name = "remote"

    def __init__(self, store: RemoteStore):
        self.store = store

    async def fetch(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        try:
            result = await self.store.read_all(collection)
        except Exception:
            logger.exception("Remote store raised while reading %s", collection)
            return None
        if not result.success:
            return None
        return list(result.data)


class CacheRepository(Repository):
    name = "cache"

    def __init__(self, cache: LocalCache):
        self.cache = cache

    async def fetch(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        payload = self.cache.read_collection(collection)
        if payload is None:
            # Older installs only kept the whole-state blob
            snapshot = self.cache.read_snapshot()
            if isinstance(snapshot, dict):
                payload = snapshot.get(collection)
        return _as_records(payload)


def _as_records(payload: Any) -> Optional[List[Any]]:
    if payload is None:
        return None
    if isinstance(payload, dict):
        # Settings are cached as a single object
        return [payload]
    if isinstance(payload, list):
        return payload
    return None


@dataclass
class LoadOutcome:
    records: List[Any]
    source: str


async def load_with_fallback(collection: str, primary: Repository, fallback: Repository) -> LoadOutcome:
    """Serve from primary when it has data, otherwise from fallback.

    An empty primary result counts as "no data" and also falls back. Never
    raises; the worst case is an empty collection.
    """
    records = await primary.fetch(collection)
    if records:
        return LoadOutcome(records=records, source=primary.name)

    if records is None:
        logger.warning("Failed to load %s from %s, using %s fallback", collection, primary.name, fallback.name)

    cached = await fallback.fetch(collection)
    return LoadOutcome(records=cached or [], source=fallback.name)
