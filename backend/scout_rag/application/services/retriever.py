"""Retriever — answers a query with the most relevant knowledge base passages.

Semantic path: embed the query (QUERY task) and rank embedded chunks by
cosine similarity. Lexical path: count query-word occurrences. The lexical
path is used when the corpus has no embeddings or the query embedding fails.

The source filter is a soft preference: when fewer than ``k`` chunks match
it, the whole corpus is ranked instead, so results can cross team
boundaries for teams with sparse data.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from scout_rag.application.interfaces.embedding_provider import EmbeddingProvider, EmbeddingTask
from scout_rag.application.services.knowledge_base import KnowledgeBase
from scout_rag.application.services.similarity import cosine_scores
from scout_rag.domain.entities.chunk import EmbeddedChunk
from scout_rag.domain.exceptions import DataSourceError, ProviderError

logger = logging.getLogger(__name__)

_MIN_QUERY_WORD_CHARS = 3


@dataclass(frozen=True)
class ScoredChunk:
    chunk: EmbeddedChunk
    score: float


def apply_source_filter(
    chunks: Sequence[EmbeddedChunk], source_filter: str | None, k: int
) -> Sequence[EmbeddedChunk]:
    """Prefer chunks whose source contains ``source_filter`` (case-insensitive).

    Falls back to all ``chunks`` when fewer than ``k`` of them match.
    """
    if not source_filter:
        return chunks
    needle = source_filter.lower()
    matching = [c for c in chunks if needle in c.source.lower()]
    if len(matching) < k:
        logger.debug(
            "Source filter %r matched %d chunks (< k=%d) — ranking full corpus",
            source_filter,
            len(matching),
            k,
        )
        return chunks
    return matching


def comparable_chunks(
    query_vector: Sequence[float], chunks: Sequence[EmbeddedChunk]
) -> list[EmbeddedChunk]:
    """Embedded chunks living in the same vector space (same length) as the query."""
    dims = len(query_vector)
    return [c for c in chunks if c.has_embedding and len(c.embedding) == dims]


def rank_by_similarity(
    query_vector: Sequence[float],
    chunks: Sequence[EmbeddedChunk],
    k: int,
    source_filter: str | None = None,
) -> list[ScoredChunk]:
    """Cosine-rank chunks whose vectors match the query length; ties keep corpus order."""
    embedded = comparable_chunks(query_vector, chunks)
    candidates = apply_source_filter(embedded, source_filter, k)
    scores = cosine_scores(query_vector, [c.embedding for c in candidates])
    scored = [ScoredChunk(c, s) for c, s in zip(candidates, scores)]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:k]


def query_words(query: str) -> list[str]:
    """Lowercase whitespace-separated words longer than two characters."""
    return [w for w in query.lower().split() if len(w) >= _MIN_QUERY_WORD_CHARS]


def rank_by_keywords(
    query: str,
    chunks: Sequence[EmbeddedChunk],
    k: int,
    source_filter: str | None = None,
) -> list[ScoredChunk]:
    """Score chunks by total occurrences of the query words; zero scores are dropped."""
    patterns = [re.compile(re.escape(w)) for w in query_words(query)]
    candidates = apply_source_filter(chunks, source_filter, k)

    scored: list[ScoredChunk] = []
    for chunk in candidates:
        lower = chunk.text.lower()
        score = sum(len(p.findall(lower)) for p in patterns)
        if score > 0:
            scored.append(ScoredChunk(chunk, float(score)))

    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:k]


class Retriever:
    """Application service for top-k passage retrieval over the knowledge base."""

    def __init__(self, knowledge_base: KnowledgeBase, embedding_provider: EmbeddingProvider):
        self._knowledge_base = knowledge_base
        self._embedding_provider = embedding_provider

    async def retrieve(
        self,
        query: str,
        k: int = 5,
        source_filter: str | None = None,
    ) -> list[str]:
        """Return up to ``k`` chunk texts, most relevant first.

        Builds the knowledge base on first use.

        Raises:
            DataSourceError: If the lazy build cannot read the team records.
        """
        chunks = await self._knowledge_base.ensure_built(self._embedding_provider)
        if not chunks or k <= 0:
            return []

        if not any(c.has_embedding for c in chunks):
            logger.debug("Corpus has no embeddings — using keyword search")
            return self._keyword_search(query, chunks, k, source_filter)

        try:
            vectors = await self._embedding_provider.embed([query], EmbeddingTask.QUERY)
        except ProviderError as exc:
            logger.warning("Query embedding failed, falling back to keyword search: %s", exc)
            return self._keyword_search(query, chunks, k, source_filter)

        if not vectors or not vectors[0]:
            return self._keyword_search(query, chunks, k, source_filter)

        if not comparable_chunks(vectors[0], chunks):
            logger.warning(
                "Query embedding has %d dimensions but no corpus vector matches, "
                "falling back to keyword search",
                len(vectors[0]),
            )
            return self._keyword_search(query, chunks, k, source_filter)

        ranked = rank_by_similarity(vectors[0], chunks, k, source_filter)
        logger.info(
            "Retrieved %d chunks (semantic, filter=%s, top score=%.3f)",
            len(ranked),
            source_filter,
            ranked[0].score if ranked else 0.0,
        )
        return [s.chunk.text for s in ranked]

    async def retrieve_or_empty(
        self,
        query: str,
        k: int = 5,
        source_filter: str | None = None,
    ) -> list[str]:
        """Like ``retrieve``, but a failed knowledge base build yields no passages."""
        try:
            return await self.retrieve(query, k, source_filter)
        except DataSourceError as exc:
            logger.warning("Retrieval unavailable, proceeding without context: %s", exc)
            return []

    @staticmethod
    def _keyword_search(
        query: str,
        chunks: Sequence[EmbeddedChunk],
        k: int,
        source_filter: str | None,
    ) -> list[str]:
        ranked = rank_by_keywords(query, chunks, k, source_filter)
        logger.info("Retrieved %d chunks (keyword, filter=%s)", len(ranked), source_filter)
        return [s.chunk.text for s in ranked]
