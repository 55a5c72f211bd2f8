"""
RAG Service Module

Lifecycle and coordination of retrieval: availability probing, repository
indexing, and query-time search, reranking and formatting. RAG is an
optional enhancement for the calling agent, so every public method here
reports problems through its return value instead of raising.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from chatter_rag.config.settings import EmbeddingConfig, RerankingStrategyType
from chatter_rag.core.vector_store import VectorStore
from chatter_rag.db.vector.base import IndexStore
from chatter_rag.db.vector.file_store import FileIndexStore
from chatter_rag.embeddings.base import Embedder
from chatter_rag.embeddings.factory import create_embedder
from chatter_rag.exceptions import RAGError
from chatter_rag.metrics.rag_metrics import RAGMetrics
from chatter_rag.models.context import RAGContext, RAGIndexingResult, RerankingInfo
from chatter_rag.models.index import SearchResult
from chatter_rag.reranking.base import Reranker
from chatter_rag.reranking.factory import create_reranker
from chatter_rag.reranking.strategies import ThresholdReranker
from chatter_rag.utils.debug import DebugLogger
from chatter_rag.utils.progress import log_debug, log_error, log_info, log_success, log_warning

CONTEXT_HEADER = "## Relevant Code Context"


def format_context(results: List[SearchResult]) -> str:
    """Render results as a markdown block for an LLM prompt.

    Each chunk gets a heading with its path and similarity, its type,
    function/class names when known, its line range and a fenced code block
    tagged with the chunk's language.
    """
    if not results:
        return ""

    lines = [CONTEXT_HEADER, ""]
    for result in results:
        chunk = result.chunk
        metadata = chunk.metadata
        lines.append(f"### {metadata.file_path} (Similarity: {result.similarity:.2f})")
        lines.append(f"**Type:** {metadata.chunk_type.value}")
        if metadata.function_name:
            lines.append(f"**Function:** {metadata.function_name}")
        if metadata.class_name:
            lines.append(f"**Class:** {metadata.class_name}")
        lines.append(f"**Lines:** {chunk.start_line}-{chunk.end_line}")
        lines.append("")
        lines.append(f"```{metadata.language or ''}")
        lines.append(chunk.content)
        lines.append("```")
        lines.append("")

    return "\n".join(lines)


class RAGService:
    """
    Entry point of the RAG engine.

    Responsibilities:
    - Probe the embedding backend once (race-safe) and build the vector store
    - Index repositories
    - Retrieve, rerank and format context for a query
    - Record retrieval metrics
    """

    def __init__(
        self,
        config: EmbeddingConfig,
        embedder: Optional[Embedder] = None,
        store: Optional[IndexStore] = None,
        metrics: Optional[RAGMetrics] = None,
    ):
        """
        Initialize the service. No backend call happens until initialize().

        Args:
            config: Embedding configuration, fixed for the service lifetime
            embedder: Embedding backend; created from config when omitted
            store: Index storage; a FileIndexStore under config.storage_dir when omitted
            metrics: Metrics sink; a fresh RAGMetrics when omitted
        """
        self.config = config
        self._embedder = embedder
        self._owns_embedder = embedder is None
        self._store: IndexStore = store or FileIndexStore(config.storage_dir)
        self.metrics = metrics or RAGMetrics()

        self._vector_store: Optional[VectorStore] = None
        self._reranker: Optional[Reranker] = None
        self._initialized = False
        self._lock = asyncio.Lock()

        if config.debug and not DebugLogger.is_enabled():
            DebugLogger.configure(enabled=True, log_dir=config.debug_log_dir)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def reranker(self) -> Optional[Reranker]:
        return self._reranker

    async def initialize(self) -> bool:
        """
        Probe the embedding backend and get ready to serve requests.

        Concurrent callers share one probe: the ready flag is checked without
        the lock first, then again under it.

        Returns:
            True when the service is ready; False when RAG is disabled or the
            backend is unavailable
        """
        if self._initialized:
            return True

        if not self.config.enabled:
            log_info("RAG disabled in configuration")
            return False

        async with self._lock:
            if self._initialized:
                return True

            try:
                embedder = self._embedder or create_embedder(self.config)
                self._embedder = embedder
                available = await embedder.check_availability()
                if available:
                    self._reranker = create_reranker(self.config, embedder)
            except (RAGError, ValueError) as e:
                log_error(f"Failed to initialize RAG service: {e}")
                available = False

            if not available:
                log_warning(
                    f"RAG service unavailable: embedding backend at {self.config.ollama_base_url} "
                    f"is not accessible"
                )
                await self._release_embedder()
                return False

            self._vector_store = VectorStore(self.config, embedder, self._store)
            self._initialized = True
            log_success(f"RAG service initialized (reranking: {self._reranker.name})")
            return True

    async def index_repository(self, repository_path: Path, repository_name: str) -> RAGIndexingResult:
        if not self._initialized or self._vector_store is None:
            return RAGIndexingResult(success=False, message="RAG service not initialized")

        log_info(f"Indexing repository: {repository_name}")
        result = await self._vector_store.index(Path(repository_path), repository_name)

        if result.success:
            message = f"Successfully indexed {result.files_processed} files with {result.chunks_indexed} chunks"
        else:
            message = result.error or "Unknown error"

        return RAGIndexingResult(
            success=result.success,
            message=message,
            files_processed=result.files_processed,
            chunks_indexed=result.chunks_indexed,
        )

    async def get_relevant_context(
        self,
        query: str,
        repository_name: str,
        max_chunks: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> RAGContext:
        """
        Retrieve the context most relevant to a query.

        The search itself applies no threshold; a pool of
        ``max_chunks * candidate_multiplier`` candidates goes to the
        configured reranker and the reranked list is capped at max_chunks.

        Args:
            query: Natural-language query
            repository_name: Repository to search
            max_chunks: Maximum chunks to return (default: config.retrieval_chunks)
            similarity_threshold: For the THRESHOLD strategy, overrides the
                configured threshold for this call; ignored by other strategies

        Returns:
            RAGContext; available=False when the service is not ready or the
            backend failed during the search
        """
        if not self._initialized or self._vector_store is None:
            self.metrics.record_availability(False)
            return RAGContext(available=False)

        if max_chunks is None:
            max_chunks = self.config.retrieval_chunks
        max_chunks = max(1, max_chunks)
        reranker = self._reranker_for_call(similarity_threshold)

        log_debug(f"Searching '{repository_name}' for: {query[:80]} (strategy: {reranker.name})")
        try:
            candidates = await self._vector_store.search(
                query,
                repository_name,
                top_k=max_chunks * self.config.candidate_multiplier,
                similarity_threshold=0.0,
            )
            reranked = await reranker.rerank(query, candidates)
        except RAGError as e:
            log_warning(f"RAG search failed for '{repository_name}': {e}")
            self.metrics.record_availability(False)
            return RAGContext(available=False)

        final = reranked[:max_chunks]
        chunks = [result.chunk for result in final]

        self.metrics.record_availability(True)
        self.metrics.record_search(repository_name, max_chunks, chunks, len(candidates))

        if final:
            log_info(f"Found {len(final)} relevant chunks ({len(candidates)} candidates, {reranker.name})")
        else:
            log_debug("No relevant chunks found")

        return RAGContext(
            available=True,
            chunks=chunks,
            formatted_context=format_context(final),
            reranking_info=RerankingInfo(
                strategy_name=reranker.name,
                results_before=len(candidates),
                results_after=len(final),
            ),
            results=final,
        )

    def _reranker_for_call(self, similarity_threshold: Optional[float]) -> Reranker:
        if (
            similarity_threshold is not None
            and self.config.reranking_strategy == RerankingStrategyType.THRESHOLD
        ):
            return ThresholdReranker(threshold=similarity_threshold)
        return self._reranker

    async def is_repository_indexed(self, repository_name: str) -> bool:
        if not self._initialized or self._vector_store is None:
            return False
        return await self._vector_store.is_indexed(repository_name)

    async def delete_repository_index(self, repository_name: str) -> bool:
        """Delete a repository's index. Returns False if none existed or deletion failed."""
        try:
            deleted = await asyncio.to_thread(self._store.delete, repository_name)
        except RAGError as e:
            log_warning(f"Could not delete index for '{repository_name}': {e}")
            return False
        if deleted:
            log_info(f"Deleted index for '{repository_name}'")
        return deleted

    async def close(self) -> None:
        await self._release_embedder()
        self._vector_store = None
        self._reranker = None
        self._initialized = False

    async def _release_embedder(self) -> None:
        # Injected embedders belong to the caller
        if self._owns_embedder and self._embedder is not None:
            await self._embedder.close()
            self._embedder = None
