import time
from typing import List

from ..embeddings.base import Embedder
from ..exceptions import EmbeddingBackendError
from ..models.index import SearchResult
from ..utils.progress import log_debug, log_warning
from ..utils.vectors import cosine_similarity
from .base import Reranker, sort_by_score

QUERY_PROMPT = "Represent this query for retrieving relevant code: {query}"
DOCUMENT_PROMPT = 'Represent this code for answering query "{query}":\n[{metadata}]\n{content}'


class OllamaContextualReranker(Reranker):
    """Re-scores candidates with query-aware embeddings.

    The query and every candidate are embedded again with instruction
    prompts that put the query next to the chunk (plus its file, function
    and class), and candidates are re-ranked by the cosine similarity of
    those embeddings. Returned results carry the refined score as their
    similarity.

    If any backend call fails, the original results are returned sorted by
    their original similarity, so a slow or broken backend only costs
    ranking quality.
    """

    def __init__(
        self,
        embedder: Embedder,
        top_k: int = 10,
        truncate_chunks: bool = True,
        max_chunk_length: int = 1000,
    ):
        """Initialize the reranker.

        Args:
            embedder: Embedding backend used for the contextual embeddings
            top_k: Number of results to return
            truncate_chunks: Shorten long chunk content before embedding
            max_chunk_length: Character limit applied when truncating
        """
        self.embedder = embedder
        self.top_k = top_k
        self.truncate_chunks = truncate_chunks
        self.max_chunk_length = max_chunk_length

    @property
    def name(self) -> str:
        return "ollama-contextual-embeddings"

    def build_query_prompt(self, query: str) -> str:
        return QUERY_PROMPT.format(query=query)

    def build_document_prompt(self, query: str, result: SearchResult) -> str:
        chunk = result.chunk
        content = chunk.content
        if self.truncate_chunks and len(content) > self.max_chunk_length:
            content = content[:self.max_chunk_length] + "..."

        metadata = f"File: {chunk.metadata.file_path}"
        if chunk.metadata.function_name:
            metadata += f", Function: {chunk.metadata.function_name}"
        if chunk.metadata.class_name:
            metadata += f", Class: {chunk.metadata.class_name}"

        return DOCUMENT_PROMPT.format(query=query, metadata=metadata, content=content)

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        if not results:
            return []

        started = time.perf_counter()
        try:
            query_embedding = await self.embedder.embed(self.build_query_prompt(query))
            document_embeddings = await self.embedder.embed_batch(
                [self.build_document_prompt(query, r) for r in results]
            )
            failed = sum(1 for embedding in document_embeddings if embedding is None)
            if failed:
                raise EmbeddingBackendError(f"{failed} of {len(results)} document embeddings failed")
            rescored = [
                result.model_copy(update={"similarity": cosine_similarity(query_embedding, embedding)})
                for result, embedding in zip(results, document_embeddings)
            ]
        except (EmbeddingBackendError, ValueError) as e:
            log_warning(f"Contextual reranking failed, keeping original order: {e}")
            return sort_by_score(results)[:self.top_k]

        final = sort_by_score(rescored)[:self.top_k]
        log_debug(
            f"Contextual reranking scored {len(results)} chunks in "
            f"{(time.perf_counter() - started) * 1000:.0f}ms"
        )
        return final
