"""Tests for filter_state_store module."""
import json

import pytest
import pytest_asyncio

from bookmark_filters.config import FilterConfig
from bookmark_filters.filter_state_store import FilterStateStore
from bookmark_filters.models import DateRange, FilterState, SortCriterion
from bookmark_filters.storage import SqliteStorage


class BrokenStorage:
    async def get(self, key):
        raise OSError("disk gone")

    async def set(self, key, value):
        raise OSError("disk gone")

    async def delete(self, key):
        raise OSError("disk gone")


@pytest.fixture
def store(storage, filter_config):
    return FilterStateStore(storage, filter_config)


@pytest.fixture
def defaults():
    return FilterState(sort_by="title", sort_direction="asc")


@pytest.mark.asyncio
class TestFilterStateStore:
    async def test_missing_returns_defaults(self, store, defaults):
        assert await store.load("sidebar", defaults) == defaults

    async def test_no_defaults_uses_empty_state(self, store):
        assert await store.load("sidebar") == FilterState()

    async def test_save_and_load(self, store, defaults):
        state = FilterState(
            search_term="meeting",
            date_range=DateRange(start="2024-01-01", end=""),
            tags=["work"],
            sort_by="timestamp",
            sort_direction="asc",
            file_filter="/videos/a.mp4",
            sort_criteria=[SortCriterion(field="title", direction="desc", priority=1)],
            enable_multi_sort=True,
        )
        await store.save("sidebar", state)
        assert await store.load("sidebar", defaults) == state

    async def test_views_are_independent(self, store):
        await store.save("sidebar", FilterState(search_term="a"))
        await store.save("window", FilterState(search_term="b"))
        assert (await store.load("sidebar")).search_term == "a"
        assert (await store.load("window")).search_term == "b"

    async def test_key_uses_prefix(self, storage, store):
        await store.save("sidebar", FilterState())
        assert "bookmark-filters-sidebar" in storage.data
        assert json.loads(storage.data["bookmark-filters-sidebar"])["sortBy"] == "createdAt"

    async def test_custom_prefix(self, storage):
        store = FilterStateStore(storage, FilterConfig(state_key_prefix="iina-bookmarks-filters-"))
        await store.save("overlay", FilterState())
        assert "iina-bookmarks-filters-overlay" in storage.data

    async def test_every_save_writes(self, storage, store):
        for term in ["a", "ab", "abc"]:
            await store.save("sidebar", FilterState(search_term=term))
        assert storage.write_count == 3

    async def test_corrupt_value_returns_defaults(self, storage, store, defaults, capsys):
        storage.data["bookmark-filters-sidebar"] = "{not json"
        assert await store.load("sidebar", defaults) == defaults
        assert "corrupt" in capsys.readouterr().err

    async def test_non_object_returns_defaults(self, storage, store, defaults):
        storage.data["bookmark-filters-sidebar"] = "[1, 2, 3]"
        assert await store.load("sidebar", defaults) == defaults

    @pytest.mark.parametrize("raw", [
        '{"tags": 5}',
        '{"tags": true}',
        '{"sortCriteria": 3}',
        '{"sortCriteria": {"field": "title"}}',
        '{"enableMultiSort": "false"}',
    ])
    async def test_wrongly_typed_fields_fall_back_to_defaults(self, storage, store, defaults, raw):
        storage.data["bookmark-filters-sidebar"] = raw
        assert await store.load("sidebar", defaults) == defaults

    async def test_oversized_priority_is_defaulted(self, storage, store, defaults):
        storage.data["bookmark-filters-sidebar"] = '{"sortCriteria": [{"field": "title", "priority": 1e400}]}'
        loaded = await store.load("sidebar", defaults)
        assert loaded.sort_criteria == [SortCriterion(field="title", direction="asc", priority=1)]

    async def test_partial_value_merges_over_defaults(self, storage, store, defaults):
        storage.data["bookmark-filters-sidebar"] = json.dumps({"searchTerm": "old"})
        loaded = await store.load("sidebar", defaults)
        assert loaded.search_term == "old"
        assert loaded.sort_by == "title"
        assert loaded.sort_direction == "asc"

    async def test_out_of_range_sort_field_rejected(self, storage, store):
        storage.data["bookmark-filters-sidebar"] = json.dumps({
            "sortBy": "rating",
            "sortCriteria": [{"field": "rating", "direction": "asc", "priority": 1}],
        })
        loaded = await store.load("sidebar")
        assert loaded.sort_by == "createdAt"
        assert loaded.sort_criteria == []

    async def test_storage_errors_are_swallowed(self, defaults, filter_config, capsys):
        store = FilterStateStore(BrokenStorage(), filter_config)
        assert await store.load("sidebar", defaults) == defaults
        await store.save("sidebar", defaults)
        await store.clear("sidebar")
        assert "disk gone" in capsys.readouterr().err

    async def test_clear(self, store, defaults):
        await store.save("sidebar", FilterState(search_term="x"))
        await store.clear("sidebar")
        assert await store.load("sidebar", defaults) == defaults


@pytest_asyncio.fixture
async def sqlite_store(storage_db_path, filter_config):
    storage = SqliteStorage(storage_db_path)
    await storage.initialize()
    yield FilterStateStore(storage, filter_config)
    await storage.close()


@pytest.mark.asyncio
async def test_round_trip_through_sqlite(sqlite_store):
    state = FilterState(search_term="persisted", tags=["a", "b"])
    await sqlite_store.save("window", state)
    assert await sqlite_store.load("window") == state
