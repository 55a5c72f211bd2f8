from abc import ABC, abstractmethod
from typing import List, Optional


class Embedder(ABC):
    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Generate embedding vector for text

        Raises:
            EmbeddingBackendError: If the backend is unreachable or the response is unusable
        """

    @abstractmethod
    async def embed_batch(self, texts: List[str]) -> List[Optional[List[float]]]:
        """Generate embeddings for multiple texts

        Args:
            texts: List of input texts to embed

        Returns:
            One entry per input text, in order; None where embedding that text failed
        """

    @abstractmethod
    async def check_availability(self) -> bool:
        """Probe the backend and confirm the configured model is served"""

    async def close(self) -> None:
        """Release network resources held by the embedder"""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the embedding model, stored with every index"""
