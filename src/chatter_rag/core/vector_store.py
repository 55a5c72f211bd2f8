"""Facade tying indexing, storage and similarity search together."""

import asyncio
from pathlib import Path
from typing import List

from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.core.indexer import Indexer
from chatter_rag.core.searcher import Searcher
from chatter_rag.db.vector.base import IndexStore
from chatter_rag.embeddings.base import Embedder
from chatter_rag.models.index import IndexingResult, SearchResult


class VectorStore:
    """Per-repository vector store.

    Every operation is scoped to one repository name; entries of different
    repositories live in separate index documents and are never compared.
    """

    def __init__(self, config: EmbeddingConfig, embedder: Embedder, store: IndexStore):
        self.config = config
        self.store = store
        self.indexer = Indexer(config, embedder, store)
        self.searcher = Searcher(embedder, store)

    async def index(self, repository_path: Path, repository_name: str) -> IndexingResult:
        return await self.indexer.index_repository(repository_path, repository_name)

    async def search(
        self,
        query: str,
        repository_name: str,
        top_k: int,
        similarity_threshold: float = 0.0,
    ) -> List[SearchResult]:
        return await self.searcher.search(query, repository_name, top_k, similarity_threshold)

    async def is_indexed(self, repository_name: str) -> bool:
        return await asyncio.to_thread(self.store.exists, repository_name)

    async def delete(self, repository_name: str) -> bool:
        return await asyncio.to_thread(self.store.delete, repository_name)
