from .context import ContextRequest, ContextResponse, KnowledgeBaseStatusSchema

__all__ = [
    "ContextRequest",
    "ContextResponse",
    "KnowledgeBaseStatusSchema",
]
