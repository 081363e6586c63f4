"""Pydantic schemas for context retrieval API requests and responses."""

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────────────


class ContextRequest(BaseModel):
    """Request body for scouting-context retrieval."""

    query: str = Field(..., min_length=1, description="Natural-language question")
    k: int | None = Field(
        default=None, ge=1, le=20, description="Maximum number of passages (defaults to RETRIEVAL_DEFAULT_K)"
    )
    team_filter: str | None = Field(
        default=None,
        description="Preferred team (substring, case-insensitive); ignored when it matches fewer than k passages",
    )


# ── Response Schemas ─────────────────────────────────────────────────


class ContextResponse(BaseModel):
    """Retrieved passages, most relevant first."""

    passages: list[str] = []
    count: int = 0


class KnowledgeBaseStatusSchema(BaseModel):
    """Snapshot of the in-process knowledge base."""

    state: str
    chunk_count: int
    embedded_chunk_count: int
    fingerprint: str | None = None
