import asyncio
import copy
import json

import pytest

from lababil.core.errors import ImportFormatError, PermissionDeniedError
from lababil.services.snapshot_service import SNAPSHOT_VERSION


@pytest.fixture
def populated(context, make_product, admin):
    make_product("p1", "Mouse", stock=5, price=1000, cost_price=600)
    make_product("p2", "Novel", stock=2, price=80000, category="Books")
    asyncio.run(context.categories.add_category("Electronics", admin))
    asyncio.run(context.categories.add_category("Books", admin))
    return context


def test_export_carries_collections_and_metadata(populated, admin):
    result = populated.snapshots.export_snapshot(admin)

    snapshot = result.value
    assert result.ok
    assert snapshot["version"] == SNAPSHOT_VERSION
    assert snapshot["exportedBy"] == "admin"
    assert {"products", "sales", "purchases", "customers", "categories", "settings"} <= set(snapshot)
    assert [p["name"] for p in snapshot["products"]] == ["Mouse", "Novel"]


def test_export_leaves_cache_and_peers_alone(populated, fake_redis, admin):
    cached = dict(fake_redis.data)
    populated.notifier.poll_peers()
    received = []
    populated.notifier.subscribe(received.append)

    result = populated.snapshots.export_snapshot(admin)

    assert result.ok
    assert fake_redis.data == cached
    assert received == []
    assert fake_redis.subscribers[populated.settings.SYNC_CHANNEL][0].queue == []


def test_export_needs_settings_access(populated, kasir):
    result = populated.snapshots.export_snapshot(kasir)

    assert isinstance(result.error, PermissionDeniedError)


def test_export_then_import_restores_state(populated, make_context, admin):
    exported = populated.snapshots.dumps(populated.snapshots.export_snapshot(admin).value)
    fresh = make_context()

    result = asyncio.run(fresh.snapshots.import_snapshot(exported, admin))

    assert result.ok
    assert fresh.state.to_snapshot() == populated.state.to_snapshot()
    assert fresh.cache.read_snapshot() == fresh.state.to_snapshot()


def test_malformed_record_aborts_import(populated, admin):
    before = copy.deepcopy(populated.state.to_snapshot())
    payload = {
        "customers": [{"name": "Siti"}],
        "products": [{"id": "p9", "name": "Cable", "stock": 3}, {"name": "No id"}],
    }

    result = asyncio.run(populated.snapshots.import_snapshot(json.dumps(payload), admin))

    assert isinstance(result.error, ImportFormatError)
    assert "position 1" in result.message
    assert populated.state.to_snapshot() == before


def test_wrong_container_shape_is_ignored(populated, admin):
    payload = {"products": {"id": "p9"}, "customers": [{"id": "c1", "name": "Siti"}]}

    result = asyncio.run(populated.snapshots.import_snapshot(json.dumps(payload), admin))

    assert result.ok
    assert result.value.imported == ["customers"]
    assert result.value.skipped == ["products"]
    assert [p.id for p in populated.state.products] == ["p1", "p2"]
    assert [c.name for c in populated.state.customers] == ["Siti"]
    assert populated.cache.read_collection("customers")[0]["name"] == "Siti"


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", b"42", json.dumps({"products": "none"})])
def test_unusable_files_are_rejected(populated, admin, raw):
    result = asyncio.run(populated.snapshots.import_snapshot(raw, admin))

    assert isinstance(result.error, ImportFormatError)
    assert len(populated.state.products) == 2


def test_settings_are_merged_over_current(populated, admin):
    payload = {"settings": {"companyName": "Toko Baru"}}

    result = asyncio.run(populated.snapshots.import_snapshot(payload, admin))

    assert result.ok
    assert populated.state.settings.company_name == "Toko Baru"
    assert populated.state.settings.currency == "IDR"


def test_legacy_snapshot_with_numeric_ids_and_duplicate_categories(populated, admin):
    payload = {
        "categories": ["Books", "books", "Toys"],
        "products": [{"id": 1712, "name": "Mouse", "price": 1000, "stock": 5}],
    }

    result = asyncio.run(populated.snapshots.import_snapshot(payload, admin))

    assert result.ok
    assert [c.name for c in populated.state.categories] == ["Books", "Toys"]
    assert populated.state.find_product("1712").name == "Mouse"


def test_import_needs_settings_access(populated, admin1):
    result = asyncio.run(populated.snapshots.import_snapshot({"customers": []}, admin1))

    assert isinstance(result.error, PermissionDeniedError)
