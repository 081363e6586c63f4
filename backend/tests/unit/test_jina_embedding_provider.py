"""Unit tests for the JinaEmbeddingProvider."""

import json

import httpx
import pytest

from scout_rag.application.interfaces.embedding_provider import EmbeddingTask
from scout_rag.domain.exceptions import ProviderError
from scout_rag.infrastructure.jina import JinaEmbeddingProvider


# ── Helpers ──


class _RecordingHandler:
    """MockTransport handler that echoes one vector per input and records payloads."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.payloads: list[dict] = []
        self.headers: list[httpx.Headers] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.payloads.append(payload)
        self.headers.append(request.headers)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream exploded")
        data = [{"index": i, "embedding": [float(len(t)), 1.0]} for i, t in enumerate(payload["input"])]
        return httpx.Response(200, json={"data": data})


def _provider(handler, **kwargs) -> JinaEmbeddingProvider:
    return JinaEmbeddingProvider(
        api_key="test-key",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        **kwargs,
    )


# ── Tests ──


@pytest.mark.asyncio
async def test_embed_batches_sequentially_in_order():
    handler = _RecordingHandler()
    texts = [f"passage {i}" for i in range(130)]

    vectors = await _provider(handler).embed(texts, EmbeddingTask.PASSAGE)

    assert [len(p["input"]) for p in handler.payloads] == [64, 64, 2]
    assert len(vectors) == 130
    assert vectors[0] == [float(len("passage 0")), 1.0]
    assert vectors[129] == [float(len("passage 129")), 1.0]


@pytest.mark.asyncio
async def test_payload_carries_model_task_and_auth():
    handler = _RecordingHandler()

    await _provider(handler).embed(["what does Cloud9 do on Bind?"], EmbeddingTask.QUERY)

    payload = handler.payloads[0]
    assert payload["model"] == "jina-embeddings-v3"
    assert payload["task"] == "retrieval.query"
    assert payload["late_chunking"] is False
    assert handler.headers[0]["authorization"] == "Bearer test-key"


@pytest.mark.asyncio
async def test_inputs_are_truncated_and_blanks_dropped():
    handler = _RecordingHandler()
    texts = ["x" * 1000, "   ", "", "short"]

    vectors = await _provider(handler).embed(texts, EmbeddingTask.PASSAGE)

    assert handler.payloads[0]["input"] == ["x" * 800, "short"]
    assert len(vectors) == 2


def test_prepare_inputs_mirrors_embed_inputs():
    provider = JinaEmbeddingProvider(api_key="k", max_input_chars=5)
    assert provider.prepare_inputs(["abcdefgh", " ", "ab"]) == ["abcde", "ab"]


@pytest.mark.asyncio
async def test_empty_input_makes_no_request():
    handler = _RecordingHandler()
    assert await _provider(handler).embed(["  "], EmbeddingTask.PASSAGE) == []
    assert handler.payloads == []


@pytest.mark.asyncio
async def test_http_error_raises_provider_error():
    handler = _RecordingHandler(status_code=500)

    with pytest.raises(ProviderError) as exc_info:
        await _provider(handler).embed(["anything"], EmbeddingTask.PASSAGE)

    assert exc_info.value.provider == "jina"
    assert exc_info.value.status_code == 500
    assert "upstream exploded" in exc_info.value.message


@pytest.mark.asyncio
async def test_network_error_raises_provider_error_without_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError) as exc_info:
        await _provider(handler).embed(["anything"], EmbeddingTask.PASSAGE)

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_count_mismatch_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"embedding": [1.0]}]})

    with pytest.raises(ProviderError):
        await _provider(handler).embed(["one", "two"], EmbeddingTask.PASSAGE)


@pytest.mark.asyncio
async def test_second_batch_failure_aborts_the_call():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 2:
            return httpx.Response(429, text="rate limited")
        size = len(json.loads(request.content)["input"])
        return httpx.Response(200, json={"data": [{"embedding": [1.0]}] * size})

    with pytest.raises(ProviderError) as exc_info:
        await _provider(handler, batch_size=2).embed(["a", "b", "c", "d", "e"], EmbeddingTask.PASSAGE)

    assert exc_info.value.status_code == 429
    assert calls["n"] == 2
