import json
import logging
from typing import Any, Optional

from ..core.cache import CacheKeys
from .redis import RedisClient

logger = logging.getLogger(__name__)


class LocalCache:
    """JSON persistence of the dashboard state on top of a string key/value store"""

    def __init__(self, redis_client: RedisClient, prefix: str = "lababil"):
        self.redis = redis_client
        self.prefix = prefix

    # Raw string access
    def get(self, key: str) -> Optional[str]:
        return self.redis.get(key)

    def set(self, key: str, value: str) -> bool:
        return self.redis.set(key, value)

    def remove(self, key: str) -> bool:
        return self.redis.delete(key)

    # JSON helpers
    def read_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable cache entry %s", key)
            return None

    def write_json(self, key: str, payload: Any) -> bool:
        return self.set(key, json.dumps(payload, sort_keys=True))

    def read_collection(self, collection: str) -> Optional[Any]:
        return self.read_json(CacheKeys.collection(self.prefix, collection))

    def write_collection(self, collection: str, payload: Any) -> bool:
        return self.write_json(CacheKeys.collection(self.prefix, collection), payload)

    def remove_collection(self, collection: str) -> bool:
        return self.remove(CacheKeys.collection(self.prefix, collection))

    def read_snapshot(self) -> Optional[Any]:
        return self.read_json(CacheKeys.snapshot(self.prefix))

    def write_snapshot(self, payload: Any) -> bool:
        return self.write_json(CacheKeys.snapshot(self.prefix), payload)

    # Migration flag
    def migration_done(self) -> bool:
        return self.get(CacheKeys.migration_done(self.prefix)) == "true"

    def mark_migration_done(self) -> bool:
        return self.set(CacheKeys.migration_done(self.prefix), "true")
