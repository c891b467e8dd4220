"""User Handlers — tests for tool envelopes and resource JSON.

Tests cover:
    - create_user returns {"ok": True, "id"} and persists the record
    - Invalid input and store failures return failure envelopes, never raise
    - create_random_user strips fences, parses, appends
    - Non-text, unparseable, wrong-shape and failing generators → failure envelope
    - list_users / get_user_details return JSON text, not-found as {"error"}
    - An undecodable backing file surfaces as {"error"}, never an exception
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from user_registry.core.domain_types import ContentType
from user_registry.core.errors import AnthropicAPIError, CorruptStoreError, StoreIOError
from user_registry.core.repository_protocols import GenerationResult
from user_registry.services.handle_users import UserHandlers


class _FakeGenerator:
    """Returns a fixed GenerationResult and records prompts."""

    def __init__(self, result: GenerationResult | None = None, error: Exception | None = None):
        self._result = result
        self._error = error
        self.calls = []

    async def generate(self, prompt, max_tokens):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        if self._error:
            raise self._error
        return self._result


def _text(text: str) -> _FakeGenerator:
    return _FakeGenerator(GenerationResult(ContentType.TEXT, text))


def _make_failing_store(error: Exception):
    store = MagicMock()
    store.append = AsyncMock(side_effect=error)
    store.load_all = AsyncMock(side_effect=error)
    store.find_by_id = AsyncMock(side_effect=error)
    return store


# ─── create_user ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_user_on_empty_store(store, ana):
    handlers = UserHandlers(store)
    result = await handlers.create_user(ana)
    assert result == {"ok": True, "id": 1, "message": "User 1 created successfully"}
    record = await store.find_by_id(1)
    assert record.model_dump() == {"id": 1, **ana}


@pytest.mark.asyncio
async def test_create_user_bad_email_is_validation_envelope(store, ana):
    handlers = UserHandlers(store)
    result = await handlers.create_user({**ana, "email": "nope"})
    assert result["ok"] is False
    assert result["error_code"] == "VALIDATION_ERROR"
    assert "email" in result["message"]
    assert await store.load_all() == []


@pytest.mark.asyncio
async def test_create_user_missing_field(store, ana):
    del ana["phone"]
    result = await UserHandlers(store).create_user(ana)
    assert result["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_user_corrupt_store(ana):
    handlers = UserHandlers(_make_failing_store(CorruptStoreError("invalid JSON", "u.json")))
    result = await handlers.create_user(ana)
    assert result == {
        "ok": False, "error_code": "CORRUPT_STORE", "message": "User store is corrupt",
    }


@pytest.mark.asyncio
async def test_create_user_disk_failure(ana):
    handlers = UserHandlers(_make_failing_store(StoreIOError("disk full", "write")))
    result = await handlers.create_user(ana)
    assert result["error_code"] == "STORE_IO_ERROR"
    assert result["message"] == "Failed to save user"


# ─── create_random_user ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_random_user_from_fenced_json(store, ana):
    await UserHandlers(store).create_user(ana)
    generator = _text(
        '```json\n{"name":"Bo","email":"bo@x.com","address":"2 Rd","phone":"555"}\n```',
    )
    result = await UserHandlers(store, max_tokens=512).create_random_user({}, generator)
    assert result["ok"] is True
    assert result["id"] == 2
    record = await store.find_by_id(2)
    assert record.name == "Bo"
    assert generator.calls[0]["max_tokens"] == 512
    assert "JSON" in generator.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_random_user_without_generator(store):
    result = await UserHandlers(store).create_random_user({}, None)
    assert result["error_code"] == "GENERATION_FAILED"


@pytest.mark.asyncio
async def test_random_user_non_text(store):
    generator = _FakeGenerator(GenerationResult(ContentType.IMAGE))
    result = await UserHandlers(store).create_random_user({}, generator)
    assert result["ok"] is False
    assert result["error_code"] == "GENERATION_FAILED"
    assert "image" in result["message"]


@pytest.mark.asyncio
async def test_random_user_unparseable(store):
    result = await UserHandlers(store).create_random_user({}, _text("Here you go: Bo"))
    assert result["error_code"] == "GENERATION_PARSE_ERROR"
    assert result["message"].startswith("Failed to generate user data")
    assert await store.load_all() == []


@pytest.mark.asyncio
async def test_random_user_wrong_shape(store):
    result = await UserHandlers(store).create_random_user(
        {}, _text('{"name":"Bo","email":"bo@x.com"}'),
    )
    assert result["error_code"] == "GENERATION_PARSE_ERROR"


@pytest.mark.asyncio
async def test_random_user_generator_failure(store):
    generator = _FakeGenerator(error=AnthropicAPIError("overloaded", "overloaded"))
    result = await UserHandlers(store).create_random_user({}, generator)
    assert result["error_code"] == "ANTHROPIC_API_ERROR"


# ─── resources ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_users_empty(store):
    assert json.loads(await UserHandlers(store).list_users()) == []


@pytest.mark.asyncio
async def test_list_users(store, ana, bo):
    handlers = UserHandlers(store)
    await handlers.create_user(ana)
    await handlers.create_user(bo)
    users = json.loads(await handlers.list_users())
    assert [u["id"] for u in users] == [1, 2]
    assert users[1] == {"id": 2, **bo}


@pytest.mark.asyncio
async def test_list_users_corrupt_store():
    handlers = UserHandlers(_make_failing_store(CorruptStoreError("x", "u.json")))
    assert json.loads(await handlers.list_users()) == {"error": "User store is corrupt"}


@pytest.mark.asyncio
async def test_user_details(store, ana):
    handlers = UserHandlers(store)
    await handlers.create_user(ana)
    assert json.loads(await handlers.get_user_details("1")) == {"id": 1, **ana}


@pytest.mark.parametrize("user_id", ["2", "abc", "", "-1"])
@pytest.mark.asyncio
async def test_user_details_not_found(store, ana, user_id):
    handlers = UserHandlers(store)
    await handlers.create_user(ana)
    assert json.loads(await handlers.get_user_details(user_id)) == {"error": "User not found"}


@pytest.mark.asyncio
async def test_resources_on_non_utf8_file(store, store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_bytes(b"[\xff\xfe]")
    handlers = UserHandlers(store)
    assert json.loads(await handlers.list_users()) == {"error": "User store is corrupt"}
    assert json.loads(await handlers.get_user_details("1")) == {"error": "User store is corrupt"}
