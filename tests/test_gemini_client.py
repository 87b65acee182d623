"""Tests for the Gemini recommendation client."""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from tagscope.api.gemini_client import (
    GeminiClient,
    GenerationError,
    build_prompt,
    serialize_input,
)


def _genai_client(text="[]", side_effect=None):
    client = MagicMock()
    response = MagicMock()
    response.text = text
    client.aio.aclose = AsyncMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=response, side_effect=side_effect
    )
    return client


@pytest.fixture
def client():
    """Create a test client backed by a mocked genai SDK."""
    return GeminiClient(
        api_key="test_key",
        model="gemini-pro-test",
        flash_model="gemini-flash-test",
        client=_genai_client('[{"element": "A", "reason": "r"}]'),
    )


def test_serialize_input_passes_strings():
    assert serialize_input('{"elements": []}') == '{"elements": []}'


def test_serialize_input_dumps_objects():
    payload = {"elements": [{"type": "link", "text": "Café"}]}
    assert json.loads(serialize_input(payload)) == payload
    assert "Café" in serialize_input(payload)


def test_build_prompt_embeds_inventory():
    prompt = build_prompt({"elements": [{"selector": "#signup"}]})
    assert '"selector": "#signup"' in prompt
    assert '"selector_code"' in prompt


def test_select_model(client):
    assert client.select_model() == "gemini-pro-test"
    assert client.select_model(use_flash=True) == "gemini-flash-test"


@pytest.mark.asyncio
async def test_generate_text(client):
    text = await client.generate_text("hello", use_flash=True)

    assert text == '[{"element": "A", "reason": "r"}]'
    call = client._client.aio.models.generate_content.await_args
    assert call.kwargs["model"] == "gemini-flash-test"
    assert call.kwargs["contents"] == "hello"
    assert call.kwargs["config"].max_output_tokens == 1000
    assert call.kwargs["config"].temperature == 1.0


@pytest.mark.asyncio
async def test_recommend_sends_prompt(client):
    await client.recommend({"elements": [{"selector": "button.cta"}]})

    call = client._client.aio.models.generate_content.await_args
    assert "button.cta" in call.kwargs["contents"]
    assert call.kwargs["model"] == "gemini-pro-test"


@pytest.mark.asyncio
async def test_missing_api_key():
    client = GeminiClient(api_key=None)
    with pytest.raises(GenerationError, match="GOOGLE_API_KEY"):
        await client.generate_text("hello")


@pytest.mark.asyncio
async def test_sdk_failure_wrapped():
    client = GeminiClient(
        api_key="test_key", client=_genai_client(side_effect=RuntimeError("quota"))
    )
    with pytest.raises(GenerationError, match="quota"):
        await client.generate_text("hello")


@pytest.mark.asyncio
async def test_empty_reply():
    client = GeminiClient(api_key="test_key", client=_genai_client(text=None))
    with pytest.raises(GenerationError, match="empty reply"):
        await client.generate_text("hello")


@pytest.mark.asyncio
async def test_close_releases_sdk_transport(client):
    sdk = client._client
    await client.close()

    sdk.aio.aclose.assert_awaited_once()
    assert client._client is None


@pytest.mark.asyncio
async def test_close_without_client_is_noop():
    client = GeminiClient(api_key=None)
    await client.close()
    assert client._client is None
