import logging
from typing import Any, List, Optional

import redis

logger = logging.getLogger(__name__)


class RedisClient:
    """Thin string key/value wrapper around redis.

    Connection problems degrade to cache misses so the dashboard keeps
    working from memory when redis is down.
    """

    def __init__(self, url: Optional[str] = None, client: Any = None):
        if client is None:
            client = redis.from_url(url, decode_responses=True)
        self.client = client

    # Basic operations
    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.warning("Redis get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: str, expire: Optional[int] = None) -> bool:
        try:
            if expire:
                self.client.setex(key, expire, value)
            else:
                self.client.set(key, value)
            return True
        except redis.RedisError as e:
            logger.warning("Redis set failed for %s: %s", key, e)
            return False

    def delete(self, *keys: str) -> bool:
        if not keys:
            return True
        try:
            self.client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.warning("Redis delete failed for %s: %s", ", ".join(keys), e)
            return False

    def exists(self, key: str) -> bool:
        try:
            return self.client.exists(key) > 0
        except redis.RedisError:
            return False

    # Pub/sub for cross-process change signaling
    def publish(self, channel: str, message: str) -> bool:
        try:
            self.client.publish(channel, message)
            return True
        except redis.RedisError as e:
            logger.warning("Redis publish failed on %s: %s", channel, e)
            return False

    def subscribe(self, channel: str) -> Optional[Any]:
        try:
            pubsub = self.client.pubsub(ignore_subscribe_messages=True)
            pubsub.subscribe(channel)
            return pubsub
        except redis.RedisError as e:
            logger.warning("Redis subscribe failed on %s: %s", channel, e)
            return None

    def drain(self, pubsub: Any) -> List[str]:
        """Return every pending message body without blocking"""
        messages = []
        try:
            while True:
                message = pubsub.get_message(timeout=0)
                if message is None:
                    break
                if message.get("type") == "message":
                    messages.append(message["data"])
        except redis.RedisError as e:
            logger.warning("Redis pubsub read failed: %s", e)
        return messages

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            logger.warning("Redis close failed: %s", e)
