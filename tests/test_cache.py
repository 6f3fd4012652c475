from lababil.core.cache import CacheKeys
from lababil.core.permissions import Section, allowed_sections, is_section_allowed
from lababil.models.user import UserRole


def test_collections_round_trip_through_redis(context, fake_redis):
    context.cache.write_collection("customers", [{"id": "c1", "name": "Siti"}])

    assert "lababil-customers" in fake_redis.data
    assert context.cache.read_collection("customers") == [{"id": "c1", "name": "Siti"}]

    context.cache.remove_collection("customers")
    assert context.cache.read_collection("customers") is None


def test_unreadable_entries_read_as_missing(context, fake_redis):
    fake_redis.data[CacheKeys.snapshot("lababil")] = "{broken"

    assert context.cache.read_snapshot() is None


def test_redis_outage_degrades_to_misses(context, fake_redis):
    fake_redis.down = True

    assert context.cache.write_collection("products", []) is False
    assert context.cache.read_collection("products") is None
    assert context.cache.migration_done() is False
    assert context.redis.ping() is False
    assert context.notifier.poll_peers() == []


def test_role_sections():
    assert allowed_sections(UserRole.KASIR) == {Section.DASHBOARD, Section.SALES}
    assert allowed_sections(UserRole.ADMIN1) == {Section.DASHBOARD, Section.PURCHASES}
    assert allowed_sections(UserRole.ADMIN) == set(Section)
    assert allowed_sections(UserRole.DEMO) == {Section.DASHBOARD}
    assert not is_section_allowed(UserRole.USER, Section.REPORTS)
