"""Unit tests for the KnowledgeBase service — lazy, single-flight corpus builds."""

import asyncio

import pytest

from scout_rag.application.interfaces import EmbeddingCache, EmbeddingProvider, TeamRecordSource
from scout_rag.application.services import CorpusBuilder, KnowledgeBase, SplitStrategy
from scout_rag.domain.entities import CacheArtifact, Chunk, EmbeddedChunk, KnowledgeBaseState, TeamRecord
from scout_rag.domain.exceptions import DataSourceError, ProviderError
from scout_rag.infrastructure.cache import compute_fingerprint


# ── Fakes ────────────────────────────────────────────────────────────


class FakeRecordSource(TeamRecordSource):
    def __init__(self, teams: list[TeamRecord] | None = None, error: Exception | None = None, delay: float = 0.0):
        self.teams = teams or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def load_all(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.teams)


class FakeCache(EmbeddingCache):
    def __init__(self, artifact: CacheArtifact | None = None):
        self.artifact = artifact
        self.saved: list[tuple[str, list[EmbeddedChunk]]] = []

    def fingerprint(self, teams):
        return compute_fingerprint(teams)

    async def load(self, fingerprint):
        if self.artifact is not None and self.artifact.fingerprint == fingerprint:
            return self.artifact
        return None

    async def save(self, fingerprint, chunks):
        self.saved.append((fingerprint, list(chunks)))


class FakeEmbeddingProvider(EmbeddingProvider):
    def __init__(self, error: ProviderError | None = None):
        self.error = error
        self.calls = 0

    def prepare_inputs(self, texts):
        return [t[:800] for t in texts if t[:800].strip()]

    async def embed(self, texts, task):
        self.calls += 1
        if self.error:
            raise self.error
        return [[1.0, float(i)] for i, _ in enumerate(self.prepare_inputs(texts))]


def _teams() -> list[TeamRecord]:
    return [
        TeamRecord(team_name="Cloud9", matches_analyzed=12, metrics={"win_rate": 60}),
        TeamRecord(team_name="Sentinels", matches_analyzed=9, insights={"Economy": "Sentinels save after pistol losses."}),
    ]


# ── ensure_built ──


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_build():
    source = FakeRecordSource(_teams(), delay=0.05)
    provider = FakeEmbeddingProvider()
    kb = KnowledgeBase(source, FakeCache())

    results = await asyncio.gather(*(kb.ensure_built(provider) for _ in range(5)))

    assert source.calls == 1
    assert provider.calls == 1
    assert all(r == results[0] for r in results)
    assert kb.state == KnowledgeBaseState.BUILT


@pytest.mark.asyncio
async def test_built_corpus_is_reused_without_reloading():
    source = FakeRecordSource(_teams())
    provider = FakeEmbeddingProvider()
    kb = KnowledgeBase(source, FakeCache())

    first = await kb.ensure_built(provider)
    second = await kb.ensure_built(provider)

    assert first is second
    assert source.calls == 1


@pytest.mark.asyncio
async def test_fresh_build_embeds_and_saves():
    cache = FakeCache()
    kb = KnowledgeBase(FakeRecordSource(_teams()), cache)

    chunks = await kb.ensure_built(FakeEmbeddingProvider())

    assert [c.source for c in chunks] == ["Cloud9", "Sentinels"]
    assert all(c.has_embedding for c in chunks)
    assert len(cache.saved) == 1
    assert cache.saved[0][0] == compute_fingerprint(_teams())
    assert kb.fingerprint == compute_fingerprint(_teams())


@pytest.mark.asyncio
async def test_cache_hit_skips_embedding():
    cached = (EmbeddedChunk("cached text", "Cloud9", (1.0, 0.0)),)
    cache = FakeCache(CacheArtifact(compute_fingerprint(_teams()), cached))
    provider = FakeEmbeddingProvider()
    kb = KnowledgeBase(FakeRecordSource(_teams()), cache)

    chunks = await kb.ensure_built(provider)

    assert chunks == cached
    assert provider.calls == 0
    assert cache.saved == []


@pytest.mark.asyncio
async def test_provider_failure_yields_unsaved_lexical_corpus():
    cache = FakeCache()
    provider = FakeEmbeddingProvider(error=ProviderError("jina", 500, "Internal Server Error"))
    kb = KnowledgeBase(FakeRecordSource(_teams()), cache)

    chunks = await kb.ensure_built(provider)

    assert kb.state == KnowledgeBaseState.BUILT
    assert len(chunks) == 2
    assert not any(c.has_embedding for c in chunks)
    assert cache.saved == []
    assert kb.status().embedded_chunk_count == 0


@pytest.mark.asyncio
async def test_zero_teams_builds_an_empty_corpus():
    kb = KnowledgeBase(FakeRecordSource([]), FakeCache())

    assert await kb.ensure_built(FakeEmbeddingProvider()) == ()
    assert kb.state == KnowledgeBaseState.BUILT
    assert kb.fingerprint is None


@pytest.mark.asyncio
async def test_unreadable_records_reset_state_for_retry():
    source = FakeRecordSource(error=DataSourceError("/data/teams", "team records directory not found"))
    kb = KnowledgeBase(source, FakeCache())

    with pytest.raises(DataSourceError):
        await kb.ensure_built(FakeEmbeddingProvider())
    assert kb.state == KnowledgeBaseState.UNINITIALIZED

    source.error = None
    source.teams = _teams()
    chunks = await kb.ensure_built(FakeEmbeddingProvider())

    assert len(chunks) == 2
    assert source.calls == 2


# ── refresh ──


@pytest.mark.asyncio
async def test_refresh_rebuilds_only_when_fingerprint_changes():
    source = FakeRecordSource(_teams())
    provider = FakeEmbeddingProvider()
    kb = KnowledgeBase(source, FakeCache())
    await kb.ensure_built(provider)

    assert await kb.refresh(provider) is False

    source.teams = _teams() + [TeamRecord(team_name="LOUD", matches_analyzed=4, metrics={"win_rate": 55})]
    assert await kb.refresh(provider) is True
    assert {c.source for c in kb.chunks} == {"Cloud9", "Sentinels", "LOUD"}


def test_status_before_build():
    status = KnowledgeBase(FakeRecordSource(), FakeCache()).status()
    assert status.state == KnowledgeBaseState.UNINITIALIZED
    assert status.chunk_count == 0
    assert status.fingerprint is None


# ── CorpusBuilder ──


@pytest.mark.asyncio
async def test_corpus_builder_splits_oversized_chunks_per_team():
    long_insight = "Cloud9 defaults slowly on attack. " * 80
    team = TeamRecord(team_name="Cloud9", insights={"Attack": long_insight})
    builder = CorpusBuilder(FakeEmbeddingProvider(), split_strategy=SplitStrategy.FIXED)

    chunks = await builder.prepare_chunks([team])

    assert len(chunks) > 1
    assert all(len(c.text) <= 800 for c in chunks)
    assert all(c.source == "Cloud9" for c in chunks)


@pytest.mark.asyncio
async def test_embed_chunks_keeps_blank_chunks_unembedded():
    builder = CorpusBuilder(FakeEmbeddingProvider())
    chunks = [Chunk("first", "A"), Chunk("   ", "A"), Chunk("third", "B")]

    embedded = await builder.embed_chunks(chunks)

    assert [c.has_embedding for c in embedded] == [True, False, True]
    assert embedded[2].embedding == (1.0, 1.0)
