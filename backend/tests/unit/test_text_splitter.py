"""Unit tests for the TextSplitter — fixed and semantic strategies."""

import math

import pytest

from scout_rag.application.interfaces.embedding_provider import EmbeddingProvider, EmbeddingTask
from scout_rag.application.services.text_splitter import (
    SplitStrategy,
    TextSplitter,
    fixed_split,
    sentence_candidates,
)
from scout_rag.domain.exceptions import ProviderError


# ── Fakes ────────────────────────────────────────────────────────────


class TopicEmbeddingProvider(EmbeddingProvider):
    """Embeds a sentence on the x-axis if it mentions 'attack', else on the y-axis."""

    def __init__(self):
        self.calls: list[tuple[list[str], EmbeddingTask]] = []

    def prepare_inputs(self, texts):
        return [t for t in texts if t.strip()]

    async def embed(self, texts, task):
        self.calls.append((list(texts), task))
        return [[1.0, 0.0] if "attack" in t else [0.0, 1.0] for t in texts]


class FailingEmbeddingProvider(EmbeddingProvider):
    def prepare_inputs(self, texts):
        return list(texts)

    async def embed(self, texts, task):
        raise ProviderError("fake", 500, "boom")


def _sentences(word: str, count: int) -> str:
    return " ".join(f"The team plays {word} round number {i} with discipline." for i in range(count))


# ── Fixed split ──


def test_fixed_split_produces_ceil_windows_that_reassemble():
    text = "".join(chr(ord("a") + i % 26) for i in range(2050))
    pieces = fixed_split(text, 800)

    assert len(pieces) == math.ceil(len(text) / 800)
    assert all(len(p) <= 800 for p in pieces)
    assert "".join(pieces) == text


def test_fixed_split_drops_whitespace_only_windows():
    assert fixed_split("abc" + " " * 10, 3) == ["abc"]


def test_sentence_candidates_drop_short_fragments():
    text = "Overall:\n\nCloud9 wins most pistol rounds. Ok. They stack B on defense!"
    assert sentence_candidates(text) == [
        "Cloud9 wins most pistol rounds.",
        "They stack B on defense!",
    ]


# ── split() ──


@pytest.mark.asyncio
async def test_split_leaves_texts_under_threshold_untouched():
    splitter = TextSplitter(TopicEmbeddingProvider())
    text = "x" * 1600

    assert await splitter.split(text, SplitStrategy.SEMANTIC) == [text]
    assert await splitter.split(text, SplitStrategy.FIXED) == [text]


@pytest.mark.asyncio
async def test_split_fixed_strategy_windows_oversized_text():
    splitter = TextSplitter()
    pieces = await splitter.split("y" * 1700, SplitStrategy.FIXED)
    assert [len(p) for p in pieces] == [800, 800, 100]


# ── Semantic split ──


@pytest.mark.asyncio
async def test_semantic_split_breaks_on_topic_change():
    provider = TopicEmbeddingProvider()
    splitter = TextSplitter(provider, max_chars=800, min_chars=150)
    text = _sentences("attack", 6) + "\n\n" + _sentences("defense", 6)

    pieces = await splitter.semantic_split(text)

    assert len(pieces) == 2
    assert "defense" not in pieces[0]
    assert "attack" not in pieces[1]
    assert provider.calls[0][1] == EmbeddingTask.PASSAGE


@pytest.mark.asyncio
async def test_semantic_split_respects_max_chars():
    splitter = TextSplitter(TopicEmbeddingProvider(), max_chars=200, min_chars=50)
    pieces = await splitter.semantic_split(_sentences("attack", 12))

    assert len(pieces) > 1
    assert all(len(p) <= 200 for p in pieces)


@pytest.mark.asyncio
async def test_semantic_split_falls_back_to_fixed_on_provider_error():
    splitter = TextSplitter(FailingEmbeddingProvider())
    text = _sentences("attack", 40)

    pieces = await splitter.semantic_split(text)

    assert pieces == fixed_split(text, 800)


@pytest.mark.asyncio
async def test_semantic_split_returns_short_text_whole():
    provider = TopicEmbeddingProvider()
    splitter = TextSplitter(provider)
    text = "Cloud9 wins pistol rounds. They stack B on defense."

    assert await splitter.semantic_split(text) == [text]
    assert provider.calls == []


@pytest.mark.asyncio
async def test_semantic_split_single_candidate_returns_whole_text():
    provider = TopicEmbeddingProvider()
    text = "a" * 900 + " tail"

    assert await TextSplitter(provider).semantic_split(text) == [text]
    assert provider.calls == []
