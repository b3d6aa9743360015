"""Shared fixtures for tests."""
from datetime import datetime

import pytest

from bookmark_filters.config import FilterConfig
from bookmark_filters.storage import InMemoryStorage


# Every relative date filter in the tests is evaluated against this instant
FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0)


SAMPLE_BOOKMARKS = [
    {
        "id": "1",
        "title": "Meeting Notes",
        "timestamp": 120,
        "filepath": "/videos/work/standup.mp4",
        "description": "Weekly sync",
        "createdAt": "2024-03-15T09:00:00",
        "tags": ["work"],
    },
    {
        "id": "2",
        "title": "Meeting Notes",
        "timestamp": 45,
        "filepath": "/videos/work/retro.mkv",
        "description": "Retro",
        "createdAt": "2024-03-14T18:30:00",
        "tags": ["work", "completed"],
    },
    {
        "id": "3",
        "title": "Standup",
        "timestamp": 300,
        "filepath": "/videos/work/standup.mp4",
        "createdAt": "2024-03-07T10:00:00",
        "tags": ["work"],
    },
    {
        "id": "4",
        "title": "cooking pasta",
        "timestamp": 600,
        "filepath": "/videos/home/pasta.mp4",
        "description": "Carbonara recipe",
        "createdAt": "2024-01-15T20:00:00",
        "tags": ["recipe", "favorite"],
    },
    {
        "id": "5",
        "title": "Álgebra lecture",
        "timestamp": 30,
        "filepath": "/videos/school/algebra.mov",
        "description": "Linear maps",
        "createdAt": "2024-02-01T08:00:00",
        "tags": [],
    },
]


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def sample_bookmarks():
    """Return sample bookmarks as dicts in their JSON shape."""
    return [dict(b) for b in SAMPLE_BOOKMARKS]


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def filter_config():
    """Config with a short debounce so history tests settle quickly."""
    return FilterConfig(history_debounce_seconds=0.05)


@pytest.fixture
def storage_db_path(tmp_path):
    """Return path for a temporary storage database."""
    return tmp_path / "test_state.db"
