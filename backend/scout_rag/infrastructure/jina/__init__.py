"""Jina infrastructure package."""

from .jina_embedding_provider import JinaEmbeddingProvider

__all__ = ["JinaEmbeddingProvider"]
