from .base import Embedder
from .ollama import OllamaEmbedder
from ..config.settings import EmbeddingConfig


def create_embedder(config: EmbeddingConfig) -> Embedder:
    """
    Create an Embedder implementation based on configuration.

    Provider is selected via config.embedding_provider. Only "ollama" is
    currently supported; the model is config.model_name.
    """
    if config.embedding_provider == "ollama":
        return OllamaEmbedder(
            base_url=config.ollama_base_url,
            model_name=config.model_name,
            request_timeout=config.request_timeout,
            connect_timeout=config.connect_timeout,
            batch_concurrency=config.embedding_concurrency,
        )

    raise ValueError(
        f"Unknown embedding provider: {config.embedding_provider}. "
        f"Expected one of: 'ollama'."
    )
