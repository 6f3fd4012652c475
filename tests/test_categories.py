import asyncio

from lababil.core.errors import DuplicateError, EmptyNameError, PermissionDeniedError, PersistenceError


def test_names_are_unique_ignoring_case(context, store, admin):
    first = asyncio.run(context.categories.add_category("Books", admin))
    second = asyncio.run(context.categories.add_category("books", admin))

    assert first.ok
    assert not second.ok
    assert isinstance(second.error, DuplicateError)
    assert second.message == "Category already exists"
    assert [c.name for c in context.state.categories] == ["Books"]
    assert list(store.collections["categories"]) == ["Books"]


def test_blank_names_are_rejected(context):
    for name in ("", "   ", None):
        result = asyncio.run(context.categories.add_category(name))
        assert isinstance(result.error, EmptyNameError)
        assert result.message == "Category name cannot be empty"
    assert context.state.categories == []


def test_name_is_trimmed_and_cached(context):
    result = asyncio.run(context.categories.add_category("  Toys  "))

    assert result.ok
    assert result.value.name == "Toys"
    assert context.cache.read_collection("categories") == [{"id": "Toys", "name": "Toys"}]


def test_store_failure_keeps_registry_unchanged(context, store):
    store.fail("create", "categories")

    result = asyncio.run(context.categories.add_category("Toys"))

    assert isinstance(result.error, PersistenceError)
    assert context.state.categories == []


def test_kasir_cannot_manage_categories(context, kasir):
    result = asyncio.run(context.categories.add_category("Toys", kasir))

    assert isinstance(result.error, PermissionDeniedError)


def test_sorted_names_ignore_case(context):
    for name in ("sports", "Books", "Audio"):
        asyncio.run(context.categories.add_category(name))

    assert context.categories.sorted_names() == ["Audio", "Books", "sports"]
    assert context.categories.exists(" BOOKS ")
