"""Root conftest — shared test configuration and store fixtures."""

import os

import pytest

# Ensure tests don't accidentally use real API keys
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")

from user_registry.infrastructure.json_file_store import JsonFileUserStore  # noqa: E402


@pytest.fixture
def store_path(tmp_path):
    """Backing file path inside a directory that does not exist yet."""
    return tmp_path / "data" / "users.json"


@pytest.fixture
def store(store_path):
    return JsonFileUserStore(store_path)


@pytest.fixture
def ana():
    return {"name": "Ana", "email": "ana@x.com", "address": "1 Rd", "phone": "555"}


@pytest.fixture
def bo():
    return {"name": "Bo", "email": "bo@x.com", "address": "2 Rd", "phone": "555"}
