"""Knowledge base — builds the in-memory corpus of embedded chunks once per process.

This application service coordinates:
1. Loading team records via the TeamRecordSource
2. Fingerprinting the corpus and consulting the EmbeddingCache
3. Chunking + splitting (CorpusBuilder) on a cache miss
4. Embedding passages via the EmbeddingProvider
5. Saving the result back to the working cache

Lifecycle: UNINITIALIZED → BUILDING → BUILT. Concurrent callers of
``ensure_built`` share one in-flight build task.

The offline cache generator always splits with FIXED; the live service
uses whichever strategy it was configured with (FIXED by default). A live
SEMANTIC build can therefore hold differently-shaped chunks than the
shipped pre-built cache.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from scout_rag.application.interfaces.embedding_cache import EmbeddingCache
from scout_rag.application.interfaces.embedding_provider import EmbeddingProvider, EmbeddingTask
from scout_rag.application.interfaces.team_record_source import TeamRecordSource
from scout_rag.application.services.team_chunker import TeamChunker
from scout_rag.application.services.text_splitter import SplitStrategy, TextSplitter
from scout_rag.domain.entities import (
    Chunk,
    EmbeddedChunk,
    KnowledgeBaseState,
    KnowledgeBaseStatus,
    TeamRecord,
)
from scout_rag.domain.exceptions import ProviderError

logger = logging.getLogger(__name__)


class CorpusBuilder:
    """Stateless build recipe: TeamRecords → chunks → split chunks → embedded chunks."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        *,
        split_strategy: SplitStrategy = SplitStrategy.FIXED,
        chunker: TeamChunker | None = None,
        splitter: TextSplitter | None = None,
    ):
        self._embedding_provider = embedding_provider
        self._split_strategy = split_strategy
        self._chunker = chunker or TeamChunker()
        self._splitter = splitter or TextSplitter(embedding_provider)

    @property
    def split_strategy(self) -> SplitStrategy:
        return self._split_strategy

    async def prepare_chunks(self, teams: list[TeamRecord]) -> list[Chunk]:
        """Chunk every team, then split oversized chunks; order is preserved."""
        chunks = self._chunker.chunk_all(teams)

        final: list[Chunk] = []
        for chunk in chunks:
            if not self._splitter.is_oversized(chunk.text):
                final.append(chunk)
                continue
            for piece in await self._splitter.split(chunk.text, self._split_strategy):
                final.append(Chunk(text=piece, source=chunk.source))

        logger.info(
            "%d chunks after %s splitting (%d before)",
            len(final),
            self._split_strategy.value,
            len(chunks),
        )
        return final

    async def embed_chunks(self, chunks: list[Chunk]) -> tuple[EmbeddedChunk, ...]:
        """Embed chunk texts in PASSAGE mode.

        The provider drops blank inputs, so vectors are mapped back only to
        the chunks that were actually sent; the rest keep an empty embedding.

        Raises:
            ProviderError: If any embedding batch fails.
        """
        sent = [i for i, c in enumerate(chunks) if self._embedding_provider.prepare_inputs([c.text])]
        vectors = await self._embedding_provider.embed(
            [chunks[i].text for i in sent], EmbeddingTask.PASSAGE
        )
        if len(vectors) != len(sent):
            raise ProviderError(
                "embedding",
                None,
                f"Expected {len(sent)} embeddings, got {len(vectors)}",
            )

        by_index = dict(zip(sent, vectors))
        return tuple(
            EmbeddedChunk(text=c.text, source=c.source, embedding=tuple(by_index.get(i, ())))
            for i, c in enumerate(chunks)
        )

    @staticmethod
    def without_embeddings(chunks: list[Chunk]) -> tuple[EmbeddedChunk, ...]:
        """Degraded corpus: same chunks, no vectors (lexical retrieval only)."""
        return tuple(EmbeddedChunk(text=c.text, source=c.source) for c in chunks)


@dataclass(frozen=True)
class _BuildOutcome:
    fingerprint: str | None
    chunks: tuple[EmbeddedChunk, ...]


class KnowledgeBase:
    """Process-scoped owner of the embedded corpus.

    The corpus is read-only once BUILT and is only ever replaced as a whole.
    A build that fails to read the team records returns the service to
    UNINITIALIZED so a later request can try again.
    """

    def __init__(
        self,
        record_source: TeamRecordSource,
        cache: EmbeddingCache,
        *,
        split_strategy: SplitStrategy = SplitStrategy.FIXED,
        chunker: TeamChunker | None = None,
    ):
        self._record_source = record_source
        self._cache = cache
        self._split_strategy = split_strategy
        self._chunker = chunker or TeamChunker()

        self._state = KnowledgeBaseState.UNINITIALIZED
        self._chunks: tuple[EmbeddedChunk, ...] = ()
        self._fingerprint: str | None = None
        self._pending: asyncio.Task[_BuildOutcome] | None = None

    @property
    def state(self) -> KnowledgeBaseState:
        return self._state

    @property
    def chunks(self) -> tuple[EmbeddedChunk, ...]:
        return self._chunks

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    def status(self) -> KnowledgeBaseStatus:
        return KnowledgeBaseStatus(
            state=self._state,
            chunk_count=len(self._chunks),
            embedded_chunk_count=sum(1 for c in self._chunks if c.has_embedding),
            fingerprint=self._fingerprint,
        )

    async def ensure_built(self, embedding_provider: EmbeddingProvider) -> tuple[EmbeddedChunk, ...]:
        """Return the corpus, building it first if needed (single-flight).

        Raises:
            DataSourceError: If the team records cannot be read.
        """
        if self._state == KnowledgeBaseState.BUILT:
            return self._chunks

        if self._pending is None:
            self._state = KnowledgeBaseState.BUILDING
            self._pending = asyncio.create_task(self._run_build(embedding_provider))
        else:
            logger.debug("Knowledge base build already in flight — waiting for it")

        # A cancelled waiter must not cancel the shared build.
        await asyncio.shield(self._pending)
        return self._chunks

    async def refresh(self, embedding_provider: EmbeddingProvider) -> bool:
        """Rebuild the whole corpus if the team records' fingerprint changed.

        Returns True when a rebuild happened.
        """
        if self._pending is not None:
            await asyncio.shield(self._pending)

        teams = await self._record_source.load_all()
        fingerprint = self._cache.fingerprint(teams) if teams else None
        if self._state == KnowledgeBaseState.BUILT and fingerprint == self._fingerprint:
            logger.debug("Knowledge base fingerprint unchanged (%s)", fingerprint)
            return False

        logger.info("Knowledge base fingerprint changed (%s → %s), rebuilding", self._fingerprint, fingerprint)
        self._state = KnowledgeBaseState.UNINITIALIZED
        await self.ensure_built(embedding_provider)
        return True

    # ── Build ───────────────────────────────────────────────────────

    async def _run_build(self, embedding_provider: EmbeddingProvider) -> _BuildOutcome:
        try:
            outcome = await self._build(embedding_provider)
        except Exception:
            self._state = KnowledgeBaseState.UNINITIALIZED
            logger.exception("Knowledge base build failed")
            raise
        else:
            self._chunks = outcome.chunks
            self._fingerprint = outcome.fingerprint
            self._state = KnowledgeBaseState.BUILT
            return outcome
        finally:
            self._pending = None

    async def _build(self, embedding_provider: EmbeddingProvider) -> _BuildOutcome:
        logger.info("Building knowledge base...")
        start = time.monotonic()

        teams = await self._record_source.load_all()
        if not teams:
            logger.warning("No team data found — knowledge base is empty")
            return _BuildOutcome(fingerprint=None, chunks=())

        fingerprint = self._cache.fingerprint(teams)
        cached = await self._cache.load(fingerprint)
        if cached is not None:
            logger.info(
                "Loaded %d chunks from cache in %dms",
                len(cached.chunks),
                int((time.monotonic() - start) * 1000),
            )
            return _BuildOutcome(fingerprint=fingerprint, chunks=cached.chunks)

        builder = CorpusBuilder(
            embedding_provider,
            split_strategy=self._split_strategy,
            chunker=self._chunker,
        )
        chunks = await builder.prepare_chunks(teams)
        if not chunks:
            logger.warning("Team data produced no chunks — knowledge base is empty")
            return _BuildOutcome(fingerprint=fingerprint, chunks=())

        try:
            embedded = await builder.embed_chunks(chunks)
        except ProviderError as exc:
            # Degraded corpus: retrieval falls back to keyword scoring. Not
            # cached, so the next process start tries to embed again.
            logger.error("Failed to embed documents, using keyword search only: %s", exc)
            return _BuildOutcome(fingerprint=fingerprint, chunks=builder.without_embeddings(chunks))

        await self._cache.save(fingerprint, embedded)

        logger.info(
            "Knowledge base built in %dms with %d embedded chunks",
            int((time.monotonic() - start) * 1000),
            len(embedded),
        )
        return _BuildOutcome(fingerprint=fingerprint, chunks=embedded)
