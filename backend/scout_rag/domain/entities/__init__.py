from .chunk import CacheArtifact, Chunk, EmbeddedChunk
from .knowledge_base_state import KnowledgeBaseState, KnowledgeBaseStatus
from .team_record import TeamRecord

__all__ = [
    "CacheArtifact",
    "Chunk",
    "EmbeddedChunk",
    "KnowledgeBaseState",
    "KnowledgeBaseStatus",
    "TeamRecord",
]
