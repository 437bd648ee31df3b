"""
Unit tests for ModelGateway (Claude integration).

Tests model probing and caching using a mocked AsyncAnthropic client:
- Priority order and caching of the first available model
- Exhaustion, timeouts and single-flight probing
- Generation error translation and cache invalidation
"""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from health_advisor.services.ai_gateway import (
    STATE_FAILED,
    STATE_READY,
    STATE_UNINITIALIZED,
    GenerationError,
    GenerationNotFoundError,
    GenerationTimeoutError,
    ModelGateway,
    ModelUnavailableError,
    _fix_trailing_commas,
    _strip_markdown_json,
)

MODELS = ["model-fast", "model-medium", "model-slow"]
REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def text_response(text: str):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


def connection_error():
    return anthropic.APIConnectionError(request=REQUEST)


def not_found_error():
    return anthropic.NotFoundError(
        "model not found", response=httpx.Response(404, request=REQUEST), body=None
    )


def server_error():
    return anthropic.InternalServerError(
        "overloaded", response=httpx.Response(500, request=REQUEST), body=None
    )


def make_gateway(side_effect=None, probe_timeout=1.0, generation_timeout=1.0):
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=side_effect)
    gateway = ModelGateway(
        model_priority=MODELS,
        probe_timeout=probe_timeout,
        generation_timeout=generation_timeout,
        client=client,
    )
    return gateway, client


def probed_models(client) -> list:
    return [call.kwargs["model"] for call in client.messages.create.call_args_list]


# =============================================================================
# Helpers
# =============================================================================


class TestJsonHelpers:
    """Tests for markdown and trailing-comma cleanup."""

    def test_strip_markdown_json_block(self):
        assert _strip_markdown_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_plain_code_block(self):
        assert _strip_markdown_json('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text_unchanged(self):
        assert _strip_markdown_json('{"a": 1}') == '{"a": 1}'

    def test_fix_trailing_commas(self):
        assert _fix_trailing_commas('{"a": [1, 2,], "b": 3,}') == '{"a": [1, 2], "b": 3}'


# =============================================================================
# Probing
# =============================================================================


class TestProbing:
    """Tests for ensure_ready."""

    @pytest.mark.asyncio
    async def test_first_available_model_is_cached(self):
        gateway, client = make_gateway([connection_error(), text_response("ok")])

        model = await gateway.ensure_ready()

        assert model == "model-medium"
        assert gateway.current_model == "model-medium"
        assert gateway.state == STATE_READY
        assert probed_models(client) == ["model-fast", "model-medium"]

        # Cached: no further probes
        assert await gateway.ensure_ready() == "model-medium"
        assert client.messages.create.await_count == 2

    @pytest.mark.asyncio
    async def test_all_models_fail(self):
        gateway, client = make_gateway(
            [connection_error(), not_found_error(), server_error()]
        )

        with pytest.raises(ModelUnavailableError):
            await gateway.ensure_ready()

        assert gateway.state == STATE_FAILED
        assert gateway.current_model is None
        assert probed_models(client) == MODELS

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        gateway, client = make_gateway(
            [connection_error()] * 3 + [text_response("ok")]
        )

        with pytest.raises(ModelUnavailableError):
            await gateway.ensure_ready()

        assert await gateway.ensure_ready() == "model-fast"
        assert client.messages.create.await_count == 4

    @pytest.mark.asyncio
    async def test_probe_timeout_moves_to_next_model(self):
        async def create(**kwargs):
            if kwargs["model"] == "model-fast":
                await asyncio.sleep(1)
            return text_response("ok")

        gateway, client = make_gateway(create, probe_timeout=0.01)

        assert await gateway.ensure_ready() == "model-medium"

    @pytest.mark.asyncio
    async def test_probe_request_is_minimal(self):
        gateway, client = make_gateway([text_response("ok")])

        await gateway.ensure_ready()

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "test"}]
        assert kwargs["max_tokens"] <= 16

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_probe(self):
        async def create(**kwargs):
            await asyncio.sleep(0.01)
            return text_response("ok")

        gateway, client = make_gateway(create)

        results = await asyncio.gather(*(gateway.ensure_ready() for _ in range(5)))

        assert results == ["model-fast"] * 5
        assert client.messages.create.await_count == 1


# =============================================================================
# Generation
# =============================================================================


class TestGeneration:
    """Tests for generate and cache invalidation."""

    @pytest.mark.asyncio
    async def test_generate_returns_text(self):
        gateway, client = make_gateway([text_response("ok"), text_response('{"a": 1}')])

        text = await gateway.generate("prompt", system="system prompt")

        assert text == '{"a": 1}'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "model-fast"
        assert kwargs["system"] == "system prompt"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_timeout_invalidates_cache(self):
        calls = {"count": 0}

        async def create(**kwargs):
            calls["count"] += 1
            if calls["count"] == 2:
                await asyncio.sleep(1)
            return text_response("ok")

        gateway, client = make_gateway(create, generation_timeout=0.01)

        with pytest.raises(GenerationTimeoutError):
            await gateway.generate("prompt")

        assert gateway.current_model is None
        assert gateway.state == STATE_UNINITIALIZED

    @pytest.mark.asyncio
    async def test_sdk_timeout_invalidates_cache(self):
        gateway, client = make_gateway(
            [text_response("ok"), anthropic.APITimeoutError(request=REQUEST)]
        )

        with pytest.raises(GenerationTimeoutError):
            await gateway.generate("prompt")

        assert gateway.current_model is None

    @pytest.mark.asyncio
    async def test_not_found_invalidates_cache(self):
        gateway, client = make_gateway([text_response("ok"), not_found_error()])

        with pytest.raises(GenerationNotFoundError):
            await gateway.generate("prompt")

        assert gateway.current_model is None

    @pytest.mark.asyncio
    async def test_other_errors_keep_cache(self):
        gateway, client = make_gateway([text_response("ok"), server_error()])

        with pytest.raises(GenerationError) as exc_info:
            await gateway.generate("prompt")

        assert not isinstance(exc_info.value, (GenerationTimeoutError, GenerationNotFoundError))
        assert gateway.current_model == "model-fast"

    @pytest.mark.asyncio
    async def test_empty_response_is_error(self):
        gateway, client = make_gateway(
            [text_response("ok"), SimpleNamespace(content=[])]
        )

        with pytest.raises(GenerationError):
            await gateway.generate("prompt")

    @pytest.mark.asyncio
    async def test_reprobes_after_invalidation(self):
        gateway, client = make_gateway(
            [text_response("ok"), not_found_error(), connection_error(), text_response("ok")]
        )

        with pytest.raises(GenerationNotFoundError):
            await gateway.generate("prompt")

        assert await gateway.ensure_ready() == "model-medium"
