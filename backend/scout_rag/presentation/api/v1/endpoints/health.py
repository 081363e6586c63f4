"""Health check endpoint — always available, never triggers a knowledge base build."""

from fastapi import APIRouter, Depends

from scout_rag.application.services import KnowledgeBase
from scout_rag.config import get_settings
from scout_rag.infrastructure.dependencies import get_knowledge_base

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
) -> dict:
    """Returns the application health status and the knowledge base state."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "knowledge_base": knowledge_base.state.value,
        "embeddings_configured": bool(settings.jina_api_key.strip()),
    }
