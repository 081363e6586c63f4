"""Jina-based embedding provider — calls the /embeddings endpoint.

Default model: jina-embeddings-v3. Indexing uses the ``retrieval.passage``
task and queries use ``retrieval.query``; both land in the same vector space.

Batches are sent one at a time, never concurrently, to stay within the
provider's rate limits. Failures are not retried.
"""

import logging
from typing import Any

import httpx

from scout_rag.application.interfaces.embedding_provider import EmbeddingProvider, EmbeddingTask
from scout_rag.domain.exceptions import ProviderError

logger = logging.getLogger(__name__)

JINA_BATCH_SIZE = 64
MAX_INPUT_CHARS = 800


class JinaEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via the Jina /embeddings API."""

    provider_name = "jina"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.jina.ai/v1",
        model: str = "jina-embeddings-v3",
        *,
        batch_size: int = JINA_BATCH_SIZE,
        max_input_chars: int = MAX_INPUT_CHARS,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._batch_size = batch_size
        self._max_input_chars = max_input_chars
        self._timeout = timeout
        self._http_client = http_client

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    def prepare_inputs(self, texts: list[str]) -> list[str]:
        """Truncate to the input limit and drop inputs that are blank afterwards."""
        truncated = (t[: self._max_input_chars] for t in texts)
        return [t for t in truncated if t.strip()]

    async def embed(self, texts: list[str], task: EmbeddingTask) -> list[list[float]]:
        """Embed texts in sequential batches, preserving batch order."""
        inputs = self.prepare_inputs(texts)
        if not inputs:
            return []

        total_batches = (len(inputs) + self._batch_size - 1) // self._batch_size
        client = await self._get_client()
        should_close = self._http_client is None

        results: list[list[float]] = []
        try:
            for batch_idx, start in enumerate(range(0, len(inputs), self._batch_size), 1):
                batch = inputs[start : start + self._batch_size]
                logger.log(
                    logging.INFO if total_batches > 1 else logging.DEBUG,
                    "Embedding batch %d/%d (%d texts, task=%s)",
                    batch_idx,
                    total_batches,
                    len(batch),
                    task.value,
                )
                results.extend(await self._request(client, batch, task))
        finally:
            if should_close:
                await client.aclose()

        logger.info(
            "Generated %d embeddings (model=%s, task=%s, dims=%d)",
            len(results),
            self._model,
            task.value,
            len(results[0]) if results else 0,
        )
        return results

    async def _request(
        self, client: httpx.AsyncClient, batch: list[str], task: EmbeddingTask
    ) -> list[list[float]]:
        """Send one batch and return its vectors in request order."""
        url = f"{self._base_url}/embeddings"
        payload: dict[str, Any] = {
            "model": self._model,
            "task": task.value,
            "late_chunking": False,
            "input": batch,
        }

        try:
            response = await client.post(url, headers=self._get_headers(), json=payload)
        except httpx.HTTPError as exc:
            logger.error("Embedding request failed: %s", exc)
            raise ProviderError(self.provider_name, None, str(exc)) from exc

        if not response.is_success:
            error_text = response.text[:500]
            logger.error("Embedding API error %d: %s", response.status_code, error_text)
            raise ProviderError(self.provider_name, response.status_code, error_text)

        try:
            data = response.json()
            vectors = [item["embedding"] for item in data["data"]]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError(
                self.provider_name, response.status_code, f"Malformed embedding response: {exc}"
            ) from exc

        if len(vectors) != len(batch):
            raise ProviderError(
                self.provider_name,
                response.status_code,
                f"Expected {len(batch)} embeddings, got {len(vectors)}",
            )
        return vectors
