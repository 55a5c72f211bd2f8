from chatter_rag.embeddings.base import Embedder
from chatter_rag.embeddings.factory import create_embedder
from chatter_rag.embeddings.ollama import OllamaEmbedder

__all__ = ["Embedder", "OllamaEmbedder", "create_embedder"]
