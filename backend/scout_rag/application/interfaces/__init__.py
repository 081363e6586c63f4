from .embedding_cache import EmbeddingCache
from .embedding_provider import EmbeddingProvider, EmbeddingTask
from .team_record_source import TeamRecordSource

__all__ = [
    "EmbeddingCache",
    "EmbeddingProvider",
    "EmbeddingTask",
    "TeamRecordSource",
]
