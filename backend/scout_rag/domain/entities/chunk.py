"""Domain entities for retrieval chunks — text fragments with optional embeddings."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Chunk:
    """A bounded-length passage derived from one team's data."""

    text: str
    source: str  # team name


@dataclass(frozen=True)
class EmbeddedChunk:
    """A chunk plus its passage embedding.

    An empty ``embedding`` means embedding failed for this build; such
    chunks are only reachable through lexical scoring.
    """

    text: str
    source: str
    embedding: tuple[float, ...] = field(default_factory=tuple)

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "source": self.source, "embedding": list(self.embedding)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmbeddedChunk":
        return cls(
            text=str(data["text"]),
            source=str(data["source"]),
            embedding=tuple(float(x) for x in data.get("embedding") or ()),
        )


@dataclass(frozen=True)
class CacheArtifact:
    """Serialized knowledge base: the corpus fingerprint and every embedded chunk."""

    fingerprint: str
    chunks: tuple[EmbeddedChunk, ...] = ()

    @property
    def fully_embedded(self) -> bool:
        return bool(self.chunks) and all(c.has_embedding for c in self.chunks)

    @property
    def embedding_dimensions(self) -> set[int]:
        """Distinct vector lengths across embedded chunks; a usable artifact has exactly one."""
        return {len(c.embedding) for c in self.chunks if c.has_embedding}

    def to_dict(self) -> dict[str, Any]:
        return {"hash": self.fingerprint, "chunks": [c.to_dict() for c in self.chunks]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheArtifact":
        return cls(
            fingerprint=str(data["hash"]),
            chunks=tuple(EmbeddedChunk.from_dict(c) for c in data.get("chunks") or ()),
        )
