"""
Search Module

Embeds a query and ranks one repository's stored chunks by cosine
similarity. Only the requested repository's index is ever read.
"""

import asyncio
from typing import List, Optional

from chatter_rag.db.vector.base import IndexStore
from chatter_rag.embeddings.base import Embedder
from chatter_rag.models.index import EmbeddingIndex, SearchResult
from chatter_rag.utils.progress import log_debug, log_warning
from chatter_rag.utils.vectors import cosine_similarity_with_norms, l2_norm


class Searcher:
    """
    Similarity search over a stored repository index.

    Responsibilities:
    - Generate the query embedding
    - Score every stored entry of the repository against it
    - Order, threshold and rank the results
    """

    def __init__(self, embedder: Embedder, store: IndexStore):
        self.embedder = embedder
        self.store = store

    async def search(
        self,
        query: str,
        repository_name: str,
        top_k: int,
        similarity_threshold: float = 0.0,
    ) -> List[SearchResult]:
        """
        Find the chunks of a repository most similar to a query.

        Args:
            query: Natural-language query
            repository_name: Repository to search; no other index is consulted
            top_k: Maximum number of results
            similarity_threshold: Minimum cosine similarity to keep a result

        Returns:
            Results sorted by descending similarity with ranks 1..n. Ties keep
            their stored order. Empty when the repository has no index.

        Raises:
            EmbeddingBackendError: If the query cannot be embedded
            IndexStorageError: If the stored index cannot be read
        """
        index: Optional[EmbeddingIndex] = await asyncio.to_thread(self.store.load, repository_name)
        if index is None or not index.entries or top_k <= 0:
            return []

        if index.model_name != self.embedder.model_name:
            log_warning(
                f"Index for '{repository_name}' was built with '{index.model_name}' "
                f"but queries use '{self.embedder.model_name}'; re-index for meaningful scores"
            )

        query_embedding = await self.embedder.embed(query)
        query_norm = l2_norm(query_embedding)

        scored = []
        for position, entry in enumerate(index.entries):
            if len(entry.embedding) != len(query_embedding):
                log_debug(f"Skipping {entry.chunk.id}: embedding dimension mismatch")
                continue
            similarity = cosine_similarity_with_norms(
                query_embedding, query_norm, entry.embedding, entry.norm
            )
            scored.append((similarity, position, entry))

        # sorted() is stable: equal scores stay in stored order
        scored.sort(key=lambda item: item[0], reverse=True)

        results: List[SearchResult] = []
        for similarity, _, entry in scored:
            if similarity < similarity_threshold:
                break
            results.append(SearchResult(chunk=entry.chunk, similarity=similarity, rank=len(results) + 1))
            if len(results) >= top_k:
                break

        log_debug(
            f"Search in '{repository_name}' scored {len(scored)} entries, returning {len(results)}"
        )
        return results
