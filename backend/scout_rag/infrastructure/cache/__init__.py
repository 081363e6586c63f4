"""Embedding cache infrastructure package."""

from .embedding_cache import EmbeddingCacheManager, compute_fingerprint, write_artifact

__all__ = ["EmbeddingCacheManager", "compute_fingerprint", "write_artifact"]
