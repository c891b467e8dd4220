"""Resilient Anthropic Client — tests for retry policy and error mapping.

Tests cover:
    - Success on first attempt returns the SDK response
    - Rate limit and connection errors retried, then succeed
    - Retries exhausted → AnthropicAPIError with retry_after_ms
    - Timeouts and 4xx client errors fail immediately
    - Backoff stays within ±25% jitter and max_delay_ms
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest

from user_registry.core.errors import AnthropicAPIError
from user_registry.infrastructure.anthropic_client import ResilientAnthropicClient

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _response(status: int, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(status, headers=headers or {}, request=_REQUEST)


def _rate_limit(retry_after: str = "0") -> anthropic.RateLimitError:
    return anthropic.RateLimitError(
        "rate limited", response=_response(429, {"retry-after": retry_after}), body=None,
    )


def _message():
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text="hi")],
        usage=SimpleNamespace(input_tokens=10, output_tokens=5),
    )


def _make_client(side_effect, max_retries=2):
    inner = SimpleNamespace(messages=SimpleNamespace(create=AsyncMock(side_effect=side_effect)))
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", max_retries=max_retries,
        base_delay_ms=0, max_delay_ms=0, client=inner,
    )
    return client, inner.messages.create


async def _call(client):
    return await client.create_message(
        model="claude-test", max_tokens=64,
        messages=[{"role": "user", "content": "hello"}],
    )


@pytest.mark.asyncio
async def test_success_first_attempt():
    message = _message()
    client, create = _make_client([message])
    assert await _call(client) is message
    assert create.await_count == 1


@pytest.mark.asyncio
async def test_rate_limit_then_success():
    message = _message()
    client, create = _make_client([_rate_limit(), message])
    assert await _call(client) is message
    assert create.await_count == 2


@pytest.mark.asyncio
async def test_connection_error_then_success():
    message = _message()
    client, create = _make_client([anthropic.APIConnectionError(request=_REQUEST), message])
    assert await _call(client) is message
    assert create.await_count == 2


@pytest.mark.asyncio
async def test_rate_limit_exhausted_raises():
    client, create = _make_client([_rate_limit("0")] * 3, max_retries=2)
    with pytest.raises(AnthropicAPIError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "rate_limit"
    assert exc.value.context.retry_after_ms == 0
    assert create.await_count == 3


@pytest.mark.asyncio
async def test_timeout_not_retried():
    client, create = _make_client([anthropic.APITimeoutError(request=_REQUEST)])
    with pytest.raises(AnthropicAPIError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "timeout"
    assert create.await_count == 1


@pytest.mark.asyncio
async def test_client_error_not_retried():
    error = anthropic.BadRequestError("bad request", response=_response(400), body=None)
    client, create = _make_client([error])
    with pytest.raises(AnthropicAPIError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "client_error"
    assert create.await_count == 1


def test_backoff_bounds():
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", base_delay_ms=1000, max_delay_ms=4000,
        client=SimpleNamespace(),
    )
    for attempt, base in ((0, 1000), (1, 2000), (2, 4000), (5, 4000)):
        delay = client._backoff(attempt)
        assert base * 0.75 <= delay <= base * 1.25
