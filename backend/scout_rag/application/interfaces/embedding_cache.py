"""Abstract interface (port) for the persisted embedding cache."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from scout_rag.domain.entities.chunk import CacheArtifact, EmbeddedChunk
from scout_rag.domain.entities.team_record import TeamRecord


class EmbeddingCache(ABC):
    """Port for loading and saving a fingerprinted cache artifact."""

    @abstractmethod
    def fingerprint(self, teams: Sequence[TeamRecord]) -> str:
        """Return the corpus fingerprint an artifact must carry to be reused."""
        ...

    @abstractmethod
    async def load(self, fingerprint: str) -> CacheArtifact | None:
        """Return a fully-embedded artifact matching ``fingerprint``, or None on a miss."""
        ...

    @abstractmethod
    async def save(self, fingerprint: str, chunks: Sequence[EmbeddedChunk]) -> None:
        """Persist chunks to the writable cache location."""
        ...
