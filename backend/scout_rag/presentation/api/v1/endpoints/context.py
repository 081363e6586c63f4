"""Context retrieval endpoints — grounding passages for the chat endpoint."""

from fastapi import APIRouter, Depends

from scout_rag.application.schemas.context import (
    ContextRequest,
    ContextResponse,
    KnowledgeBaseStatusSchema,
)
from scout_rag.application.services import KnowledgeBase, Retriever
from scout_rag.config import get_settings
from scout_rag.infrastructure.dependencies import get_knowledge_base, get_retriever

router = APIRouter(tags=["Context"])


@router.post("/context", response_model=ContextResponse)
async def retrieve_context(
    body: ContextRequest,
    retriever: Retriever | None = Depends(get_retriever),
):
    """Return the top-k scouting passages for a question (empty when retrieval is unavailable)."""
    if retriever is None:
        return ContextResponse()
    k = body.k or get_settings().retrieval_default_k
    passages = await retriever.retrieve_or_empty(body.query, k, body.team_filter)
    return ContextResponse(passages=passages, count=len(passages))


@router.get("/knowledge-base/status", response_model=KnowledgeBaseStatusSchema)
async def knowledge_base_status(
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
):
    """Report the knowledge base lifecycle state without triggering a build."""
    status = knowledge_base.status()
    return KnowledgeBaseStatusSchema(
        state=status.state.value,
        chunk_count=status.chunk_count,
        embedded_chunk_count=status.embedded_chunk_count,
        fingerprint=status.fingerprint,
    )
