"""Abstract interface (port) for embedding generation."""

from abc import ABC, abstractmethod
from enum import Enum


class EmbeddingTask(str, Enum):
    """Instruction conditioning for the embedding model.

    Index with PASSAGE, search with QUERY; both share one vector space.
    """

    PASSAGE = "retrieval.passage"
    QUERY = "retrieval.query"


class EmbeddingProvider(ABC):
    """Port for generating text embeddings — implemented in the infrastructure layer."""

    @abstractmethod
    async def embed(self, texts: list[str], task: EmbeddingTask) -> list[list[float]]:
        """Generate embedding vectors for a list of texts.

        Inputs are truncated to the provider's character limit and inputs
        that are empty after stripping are dropped, so the result can be
        shorter than ``texts``. Use ``prepare_inputs`` to re-align positions.

        Raises:
            ProviderError: If the provider responds with an error.
        """
        ...

    @abstractmethod
    def prepare_inputs(self, texts: list[str]) -> list[str]:
        """Return the truncated inputs that ``embed`` would send, empties removed."""
        ...
