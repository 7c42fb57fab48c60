import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from ai import SOLUTION_CONFIG, GeminiClient
from errors import GenerationFailure


def _fake_genai(result=None, side_effect=None):
    generate_content = AsyncMock(return_value=result, side_effect=side_effect)
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))


def test_generate_passes_sampling_parameters():
    fake = _fake_genai(SimpleNamespace(text="  1. Add the numbers.  "))
    client = GeminiClient(api_key="test-key", model="gemini-test", client=fake)

    text = asyncio.run(client.generate("Solve it", SOLUTION_CONFIG))

    assert text == "1. Add the numbers."
    kwargs = fake.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["contents"] == "Solve it"
    cfg = kwargs["config"]
    assert cfg.temperature == 0.5
    assert cfg.top_k == 1
    assert cfg.top_p == 0.8
    assert cfg.max_output_tokens == 2048


@pytest.mark.parametrize("text", [None, "", "   "])
def test_generate_empty_response_fails(text):
    client = GeminiClient(api_key="test-key", client=_fake_genai(SimpleNamespace(text=text)))
    with pytest.raises(GenerationFailure):
        asyncio.run(client.generate("prompt"))


def test_generate_transport_error_fails():
    fake = _fake_genai(side_effect=httpx.ConnectError("connection refused"))
    client = GeminiClient(api_key="test-key", client=fake)
    with pytest.raises(GenerationFailure):
        asyncio.run(client.generate("prompt"))


def test_missing_api_key_fails_without_calling_provider():
    client = GeminiClient(api_key="")
    with pytest.raises(GenerationFailure) as exc:
        asyncio.run(client.generate("prompt"))
    assert "GOOGLE_API_KEY" in exc.value.detail
