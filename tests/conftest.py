import asyncio
import operator
from collections import defaultdict
from datetime import datetime
from decimal import Decimal

import pytest
import pytz
import redis

from lababil.config import Settings
from lababil.context import build_context
from lababil.models.inventory import Product
from lababil.models.user import Identity, UserRole
from lababil.services.redis import RedisClient
from lababil.services.remote_store import RemoteStore, StoreResult

COMPARISONS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda field, values: field in values,
}


class InMemoryStore(RemoteStore):
    """Remote store double keeping documents in dicts, with switchable failures.

    Writes yield to the event loop once, like a network round trip, so
    overlapping commits interleave.
    """

    def __init__(self):
        self.collections = defaultdict(dict)
        self.failures = set()

    def fail(self, operation, collection=None):
        self.failures.add((operation, collection))

    def recover(self):
        self.failures.clear()

    def _failing(self, operation, collection):
        return (operation, None) in self.failures or (operation, collection) in self.failures

    def documents(self, collection):
        return list(self.collections[collection].values())

    async def create_with_id(self, collection, doc_id, data):
        await asyncio.sleep(0)
        if self._failing("create", collection):
            return StoreResult(success=False, error="create failed")
        document = {**data, "id": str(doc_id)}
        self.collections[collection][str(doc_id)] = document
        return StoreResult(success=True, data=[document])

    async def read_all(self, collection):
        if self._failing("read_all", collection):
            return StoreResult(success=False, error="read failed")
        return StoreResult(success=True, data=self.documents(collection))

    async def update(self, collection, doc_id, data):
        await asyncio.sleep(0)
        if self._failing("update", collection):
            return StoreResult(success=False, error="update failed")
        if str(doc_id) not in self.collections[collection]:
            return StoreResult(success=False, error="not found")
        self.collections[collection][str(doc_id)].update(data)
        return StoreResult(success=True, data=[self.collections[collection][str(doc_id)]])

    async def delete(self, collection, doc_id):
        await asyncio.sleep(0)
        if self._failing("delete", collection):
            return StoreResult(success=False, error="delete failed")
        self.collections[collection].pop(str(doc_id), None)
        return StoreResult(success=True)

    async def query_by_field(self, collection, field, op, value):
        if self._failing("query", collection):
            return StoreResult(success=False, error="query failed")
        compare = COMPARISONS[op]
        matches = [doc for doc in self.documents(collection) if field in doc and compare(doc[field], value)]
        return StoreResult(success=True, data=matches)


class FakePubSub:
    def __init__(self, server):
        self.server = server
        self.queue = []

    def subscribe(self, channel):
        self.server.subscribers[channel].append(self)

    def get_message(self, timeout=0):
        if self.queue:
            return self.queue.pop(0)
        return None


class FakeRedis:
    """Dict-backed stand-in for a redis connection; share one between contexts to model peers"""

    def __init__(self):
        self.data = {}
        self.subscribers = defaultdict(list)
        self.down = False
        self.closed = False

    def _check(self):
        if self.down:
            raise redis.ConnectionError("redis is down")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        return True

    def setex(self, key, seconds, value):
        return self.set(key, value)

    def delete(self, *keys):
        self._check()
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def exists(self, key):
        self._check()
        return int(key in self.data)

    def publish(self, channel, message):
        self._check()
        for pubsub in self.subscribers[channel]:
            pubsub.queue.append({"type": "message", "channel": channel, "data": message})
        return len(self.subscribers[channel])

    def pubsub(self, ignore_subscribe_messages=False):
        self._check()
        return FakePubSub(self)

    def ping(self):
        self._check()
        return True

    def close(self):
        self.closed = True


NOW = pytz.timezone("Asia/Jakarta").localize(datetime(2024, 5, 20, 10, 30))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def settings():
    return Settings(_env_file=None, SYNC_POLL_SECONDS=0, CLEANUP_INTERVAL_SECONDS=0)


@pytest.fixture
def make_context(store, fake_redis, settings):
    """Contexts built by this factory share the remote store and redis, like two dashboard processes"""

    def factory():
        return build_context(settings, store, RedisClient(client=fake_redis), clock=lambda: NOW)

    return factory


@pytest.fixture
def context(make_context):
    return make_context()


@pytest.fixture
def make_product(context, store):
    """Put a product in memory and in the remote store"""

    def factory(product_id, name, stock, price=1000, cost_price=0, category="Electronics", min_stock=5):
        product = Product(
            id=product_id,
            name=name,
            stock=stock,
            price=Decimal(price),
            cost_price=Decimal(cost_price),
            category=category,
            min_stock=min_stock,
        )
        context.state.products.append(product)
        store.collections["products"][product.id] = product.to_document()
        return product

    return factory


@pytest.fixture
def admin():
    return Identity(username="admin", role=UserRole.ADMIN, display_name="Administrator")


@pytest.fixture
def kasir():
    return Identity(username="kasir", role=UserRole.KASIR)


@pytest.fixture
def admin1():
    return Identity(username="gudang", role=UserRole.ADMIN1)
