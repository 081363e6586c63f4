"""Dependency wiring — connects infrastructure adapters to the application layer."""

import logging
from functools import lru_cache

from scout_rag.config import Settings, get_settings
from scout_rag.application.services import KnowledgeBase, Retriever
from scout_rag.infrastructure.cache import EmbeddingCacheManager
from scout_rag.infrastructure.jina import JinaEmbeddingProvider
from scout_rag.infrastructure.storage.team_record_store import JsonTeamRecordStore

logger = logging.getLogger(__name__)


def build_embedding_provider(api_key: str, settings: Settings | None = None) -> JinaEmbeddingProvider:
    """Jina provider configured from settings, authenticated with ``api_key``."""
    settings = settings or get_settings()
    return JinaEmbeddingProvider(
        api_key=api_key,
        base_url=settings.jina_base_url,
        model=settings.jina_model,
        batch_size=settings.jina_batch_size,
        max_input_chars=settings.embedding_max_input_chars,
        timeout=settings.embedding_timeout,
    )


@lru_cache
def get_knowledge_base() -> KnowledgeBase:
    """The process-wide knowledge base (one corpus per process)."""
    settings = get_settings()
    return KnowledgeBase(
        record_source=JsonTeamRecordStore(settings.teams_dir),
        cache=EmbeddingCacheManager(
            prebuilt_path=settings.prebuilt_cache_file,
            working_path=settings.working_cache_file,
        ),
        split_strategy=settings.live_split_strategy,
    )


def get_retriever() -> Retriever | None:
    """Retriever bound to the configured Jina key; None when no key is configured."""
    settings = get_settings()
    api_key = settings.jina_api_key.strip()
    if not api_key:
        logger.warning("JINA_API_KEY is not configured; context retrieval is disabled.")
        return None
    return Retriever(get_knowledge_base(), build_embedding_provider(api_key, settings))


async def retrieve_context(
    query: str,
    api_key: str,
    k: int = 5,
    team_filter: str | None = None,
) -> list[str]:
    """Top-k scouting passages for ``query``, for grounding a chat response.

    Never raises for retrieval failures; the caller gets fewer or no passages.
    """
    if not api_key or not api_key.strip():
        logger.warning("No embedding API key supplied; skipping context retrieval")
        return []
    retriever = Retriever(get_knowledge_base(), build_embedding_provider(api_key.strip()))
    return await retriever.retrieve_or_empty(query, k, team_filter)
