"""Text splitter — divides oversized chunks into retrieval-sized passages.

Two strategies, chosen explicitly by the caller:

- FIXED: contiguous character windows; no I/O, always available.
- SEMANTIC: sentence candidates grouped by embedding similarity of
  neighbouring sentences, bounded by a maximum and a minimum chunk length.
  Falls back to FIXED when the embedding provider fails.
"""

import logging
import re
from enum import Enum

from scout_rag.application.interfaces.embedding_provider import EmbeddingProvider, EmbeddingTask
from scout_rag.application.services.similarity import cosine_similarity
from scout_rag.domain.exceptions import ProviderError

logger = logging.getLogger(__name__)

# ── Splitting constants ─────────────────────────────────────────────
SEMANTIC_MAX_CHARS = 800
SEMANTIC_MIN_CHARS = 150
SEMANTIC_THRESHOLD = 0.75
OVERSIZED_CHARS = SEMANTIC_MAX_CHARS * 2
_MIN_SENTENCE_CHARS = 10  # shorter candidates are noise ("Overall:", list markers)

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+|\n{2,}")


class SplitStrategy(str, Enum):
    """How an oversized chunk is divided."""

    FIXED = "fixed"
    SEMANTIC = "semantic"


def fixed_split(text: str, size: int = SEMANTIC_MAX_CHARS) -> list[str]:
    """Slice text into contiguous ``size``-character windows, stripped, empties dropped."""
    chunks: list[str] = []
    for start in range(0, len(text), size):
        piece = text[start : start + size].strip()
        if piece:
            chunks.append(piece)
    return chunks


def sentence_candidates(text: str) -> list[str]:
    """Split on sentence punctuation followed by whitespace, or on blank lines."""
    parts = (p.strip() for p in _SENTENCE_BOUNDARY.split(text))
    return [p for p in parts if len(p) > _MIN_SENTENCE_CHARS]


class TextSplitter:
    """Splits oversized texts with a fixed or an embedding-aware strategy.

    The semantic strategy needs an ``EmbeddingProvider``; without one it
    degrades to fixed splitting.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider | None = None,
        *,
        max_chars: int = SEMANTIC_MAX_CHARS,
        min_chars: int = SEMANTIC_MIN_CHARS,
        threshold: float = SEMANTIC_THRESHOLD,
    ):
        self._embedding_provider = embedding_provider
        self._max_chars = max_chars
        self._min_chars = min_chars
        self._threshold = threshold

    @property
    def oversized_chars(self) -> int:
        return self._max_chars * 2

    def is_oversized(self, text: str) -> bool:
        return len(text) > self.oversized_chars

    def fixed_split(self, text: str) -> list[str]:
        return fixed_split(text, self._max_chars)

    async def split(self, text: str, strategy: SplitStrategy) -> list[str]:
        """Split ``text`` if it is oversized; otherwise return it unchanged."""
        if not self.is_oversized(text):
            return [text]
        if strategy == SplitStrategy.SEMANTIC:
            return await self.semantic_split(text)
        return self.fixed_split(text)

    async def semantic_split(self, text: str) -> list[str]:
        """Group neighbouring sentences while they stay on-topic and under the size cap."""
        candidates = sentence_candidates(text)
        whole = [text.strip()] if text.strip() else []

        if len(candidates) <= 1:
            return whole
        # Short texts are not worth the embedding cost.
        if len(text) < self._min_chars * 2:
            return whole

        if self._embedding_provider is None:
            logger.debug("No embedding provider for semantic split — using fixed split")
            return self.fixed_split(text)

        try:
            vectors = await self._embedding_provider.embed(candidates, EmbeddingTask.PASSAGE)
        except ProviderError as exc:
            logger.warning("Semantic split embedding failed, falling back to fixed split: %s", exc)
            return self.fixed_split(text)

        if len(vectors) != len(candidates):
            logger.warning(
                "Semantic split got %d vectors for %d sentences — using fixed split",
                len(vectors),
                len(candidates),
            )
            return self.fixed_split(text)

        chunks: list[str] = []
        current: list[str] = []
        current_len = 0
        prev_vector: list[float] | None = None

        for sentence, vector in zip(candidates, vectors):
            if not current:
                current = [sentence]
                current_len = len(sentence)
                prev_vector = vector
                continue

            similarity = cosine_similarity(prev_vector, vector) if prev_vector is not None else 1.0
            fits = current_len + len(sentence) <= self._max_chars
            on_topic = similarity >= self._threshold or current_len < self._min_chars

            if fits and on_topic:
                current.append(sentence)
                current_len += len(sentence) + 1
            else:
                chunks.append(" ".join(current).strip())
                current = [sentence]
                current_len = len(sentence)
            prev_vector = vector

        if current:
            chunks.append(" ".join(current).strip())

        result = [c for c in chunks if c]
        logger.debug("Semantic split: %d sentences → %d chunks", len(candidates), len(result))
        return result
