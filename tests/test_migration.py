import asyncio
from datetime import datetime, timedelta, timezone

from lababil.services.state import DEFAULT_CATEGORIES
from lababil.utils.cache_warmer import warm_state
from lababil.utils.cleanup import cleanup_old_activity_logs


def test_migration_pushes_cached_data_once(context, store):
    context.cache.write_collection("products", [{"id": 1, "name": "Mouse", "price": 1000, "stock": 5}])
    context.cache.write_collection("customers", [{"name": "No id"}, {"id": "c1", "name": "Siti"}])

    report = asyncio.run(context.migration.run_if_needed())

    assert report.ran
    assert report.failed == 0
    assert report.migrated["products"] == 1
    assert report.migrated["customers"] == 1
    assert report.migrated["categories"] == len(DEFAULT_CATEGORIES)
    assert store.collections["products"]["1"]["name"] == "Mouse"
    assert context.cache.migration_done()

    again = asyncio.run(context.migration.run_if_needed())

    assert not again.ran


def test_failed_migration_is_retried_next_start(context, store):
    context.cache.write_collection("products", [{"id": "p1", "name": "Mouse", "stock": 5}])
    store.fail("create", "products")

    report = asyncio.run(context.migration.run_if_needed())

    assert report.failed == 1
    assert not context.cache.migration_done()

    store.recover()
    retry = asyncio.run(context.migration.run_if_needed())

    assert retry.ran and retry.failed == 0
    assert context.cache.migration_done()


def test_warm_state_migrates_then_loads(context, store):
    context.cache.write_collection("products", [{"id": "p1", "name": "Mouse", "stock": 1}])

    asyncio.run(warm_state(context))

    assert context.cache.migration_done()
    assert [p.id for p in context.state.products] == ["p1"]
    assert len(context.state.categories) == len(DEFAULT_CATEGORIES)


def test_cleanup_removes_only_old_activity_logs(store):
    old = (datetime.now(timezone.utc) - timedelta(days=200)).isoformat()
    recent = datetime.now(timezone.utc).isoformat()
    store.collections["activity_logs"]["a"] = {"id": "a", "createdAt": old}
    store.collections["activity_logs"]["b"] = {"id": "b", "createdAt": recent}

    deleted = asyncio.run(cleanup_old_activity_logs(store, days=90))

    assert deleted == 1
    assert list(store.collections["activity_logs"]) == ["b"]


def test_cleanup_tolerates_query_failure(store):
    store.fail("query")

    assert asyncio.run(cleanup_old_activity_logs(store)) == 0
