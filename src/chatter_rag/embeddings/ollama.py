"""Embedding provider backed by a local or remote Ollama server."""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import EmbeddingBackendError
from ..utils.debug import DebugLogger
from ..utils.progress import log_debug, log_warning
from .base import Embedder


class OllamaEmbedder(Embedder):
    """Embeds text through the Ollama HTTP API.

    Availability is probed with ``GET /api/tags`` and vectors come from
    ``POST /api/embed``. A successful probe is remembered, so concurrent
    callers of ``check_availability`` hit the backend at most once.
    """

    def __init__(
        self,
        base_url: str,
        model_name: str,
        request_timeout: float = 30.0,
        connect_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        batch_concurrency: int = 4,
    ):
        """Initialize the embedder.

        Args:
            base_url: Ollama server URL, e.g. http://localhost:11434
            model_name: Name of the embedding model to request
            request_timeout: Per-request timeout in seconds
            connect_timeout: Connection timeout in seconds
            client: Optional preconfigured client (tests inject a mock transport here)
            batch_concurrency: Maximum requests in flight during embed_batch
        """
        self.base_url = base_url.rstrip("/")
        self._model_name = model_name
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(request_timeout, connect=connect_timeout)
        )
        self._available = False
        self._lock = asyncio.Lock()
        self._batch_slots = asyncio.Semaphore(batch_concurrency)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def check_availability(self) -> bool:
        if self._available:
            return True

        async with self._lock:
            if self._available:
                return True

            try:
                models = await self._list_models()
            except EmbeddingBackendError as e:
                log_warning(f"Embedding backend not available: {e}")
                return False

            wanted = self._model_name.lower()
            if not any(wanted in name.lower() for name in models):
                log_warning(
                    f"Embedding model '{self._model_name}' not found on {self.base_url}. "
                    f"Pull it with: ollama pull {self._model_name}"
                )
                return False

            self._available = True
            return True

    async def _list_models(self) -> List[str]:
        try:
            response = await self._client.get(f"{self.base_url}/api/tags")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise EmbeddingBackendError(f"Model listing failed: {e}", self.base_url) from e
        except ValueError as e:
            raise EmbeddingBackendError(f"Model listing returned invalid JSON: {e}", self.base_url) from e

        try:
            return [str(model.get("name", "")) for model in data.get("models", [])]
        except (TypeError, AttributeError) as e:
            raise EmbeddingBackendError(f"Model listing had an unexpected shape: {e}", self.base_url) from e

    async def embed(self, text: str) -> List[float]:
        payload: Dict[str, Any] = {"model": self._model_name, "input": text}

        request_id = None
        if DebugLogger.is_enabled():
            request_id = DebugLogger.log_request("ollama_embed", payload, category="embedding")

        try:
            response = await self._client.post(f"{self.base_url}/api/embed", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise EmbeddingBackendError(f"Embedding request failed: {e}", self.base_url) from e
        except ValueError as e:
            raise EmbeddingBackendError(f"Embedding response was not valid JSON: {e}", self.base_url) from e

        try:
            embeddings = data.get("embeddings") or []
            embedding = [float(value) for value in embeddings[0]] if embeddings else []
        except (TypeError, AttributeError, KeyError, ValueError) as e:
            raise EmbeddingBackendError(f"Embedding response had an unexpected shape: {e}", self.base_url) from e
        if not embedding:
            raise EmbeddingBackendError("Embedding response contained no vectors", self.base_url)

        if DebugLogger.is_enabled():
            DebugLogger.log_response("ollama_embed", {
                "embedding_dimension": len(embedding),
                "model": self._model_name,
            }, request_id, category="embedding")

        return embedding

    async def embed_batch(self, texts: List[str]) -> List[Optional[List[float]]]:
        async def embed_one(text: str) -> List[float]:
            async with self._batch_slots:
                return await self.embed(text)

        # Every request settles before returning, even when some of them fail
        results = await asyncio.gather(*(embed_one(text) for text in texts), return_exceptions=True)

        embeddings: List[Optional[List[float]]] = []
        for result in results:
            if isinstance(result, EmbeddingBackendError):
                log_debug(f"Batch embedding entry failed: {result}")
                embeddings.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                embeddings.append(result)
        return embeddings

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
