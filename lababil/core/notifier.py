import json
import logging
import uuid
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..services.redis import RedisClient

logger = logging.getLogger(__name__)


class StateChange(BaseModel):
    collections: List[str]
    origin: str


Subscriber = Callable[[StateChange], None]


class ChangeNotifier:
    """Pub/sub for "the cached state changed" notifications.

    Local subscribers are called synchronously on publish. When a redis
    client is given, changes are also broadcast on a channel so other
    dashboard processes can pick them up with ``poll_peers``. Delivery is
    advisory only: nothing here reconciles concurrent writes.
    """

    def __init__(self, redis_client: Optional[RedisClient] = None, channel: str = "lababil-sync"):
        self.redis = redis_client
        self.channel = channel
        self.origin = uuid.uuid4().hex
        self._subscribers: List[Subscriber] = []
        self._pubsub = None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify_local(self, change: StateChange) -> None:
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception("State change subscriber failed")

    def publish(self, collections: Sequence[str]) -> StateChange:
        change = StateChange(collections=list(collections), origin=self.origin)
        self.notify_local(change)
        if self.redis is not None:
            self.redis.publish(self.channel, change.model_dump_json())
        return change

    def poll_peers(self) -> List[StateChange]:
        """Changes published by other processes since the last poll"""
        if self.redis is None:
            return []
        if self._pubsub is None:
            self._pubsub = self.redis.subscribe(self.channel)
            if self._pubsub is None:
                return []

        changes = []
        for raw in self.redis.drain(self._pubsub):
            try:
                change = StateChange.model_validate(json.loads(raw))
            except (ValueError, PydanticValidationError):
                logger.warning("Ignoring malformed sync message on %s", self.channel)
                continue
            if change.origin != self.origin:
                changes.append(change)
        return changes
