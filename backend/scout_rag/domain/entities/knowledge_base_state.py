"""Lifecycle of the in-process knowledge base."""

from dataclasses import dataclass
from enum import Enum


class KnowledgeBaseState(str, Enum):
    """Corpus lifecycle: at most one BUILDING transition is in flight per process."""

    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    BUILT = "built"


@dataclass(frozen=True)
class KnowledgeBaseStatus:
    """Point-in-time snapshot of the knowledge base for operational inspection."""

    state: KnowledgeBaseState
    chunk_count: int
    embedded_chunk_count: int
    fingerprint: str | None
