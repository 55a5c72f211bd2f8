"""Semantic code search exposed to the calling agent as a tool."""

from typing import List, Optional

from pydantic import BaseModel, Field

from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.models.chunk import DocumentChunk
from chatter_rag.rag.service import RAGService
from chatter_rag.utils.progress import log_info

DEFAULT_TOP_K = 15
MAX_TOP_K = 20

TOOL_NAME = "search-code-semantically"
TOOL_DESCRIPTION = (
    "Search for code in the indexed repository using semantic search. "
    "This finds the most relevant code chunks based on the meaning of your query, not just keywords. "
    "Use this when you need to find specific implementations, patterns, or code examples."
)


class CodeChunk(BaseModel):
    """One code chunk as returned to the agent."""

    file_path: str
    content: str
    language: Optional[str] = None
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    start_line: int
    end_line: int
    chunk_type: str

    @classmethod
    def from_document_chunk(cls, chunk: DocumentChunk) -> "CodeChunk":
        metadata = chunk.metadata
        return cls(
            file_path=metadata.file_path,
            content=chunk.content,
            language=metadata.language,
            function_name=metadata.function_name,
            class_name=metadata.class_name,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            chunk_type=metadata.chunk_type.value,
        )


class SearchCodeResult(BaseModel):
    """Result of a semantic code search, including a human-readable status."""

    success: bool
    query: str
    chunks: List[CodeChunk] = Field(default_factory=list)
    message: str


class SemanticSearchTool:
    """Binds a RAG service to one repository for agent tool calls.

    The service may be missing (RAG disabled or not set up yet); every call
    then answers with an explanatory message instead of failing.
    """

    def __init__(
        self,
        service: Optional[RAGService],
        repository_name: str,
        config: Optional[EmbeddingConfig] = None,
    ):
        self.service = service
        self.repository_name = repository_name
        self.config = config

    async def search_code_semantically(self, query: str, top_k: int = DEFAULT_TOP_K) -> SearchCodeResult:
        """Search the bound repository.

        Args:
            query: Natural language description of the code to find
            top_k: Number of chunks wanted, clamped to 1..20

        Returns:
            SearchCodeResult; success is False when RAG cannot serve the query
        """
        log_info(f"Semantic search query: '{query}' (top_k: {top_k})")

        if self.service is None or not self.repository_name:
            return SearchCodeResult(
                success=False,
                query=query,
                message="RAG service not available. Repository may not be indexed yet.",
            )

        if not await self.service.is_repository_indexed(self.repository_name):
            return SearchCodeResult(
                success=False,
                query=query,
                message="Repository not indexed. RAG is not available for this repository.",
            )

        limited_top_k = min(max(top_k, 1), MAX_TOP_K)
        context = await self.service.get_relevant_context(
            query=query,
            repository_name=self.repository_name,
            max_chunks=limited_top_k,
            similarity_threshold=self.config.similarity_threshold if self.config else None,
        )

        if not context.available:
            return SearchCodeResult(
                success=False,
                query=query,
                message="RAG service not available",
            )

        chunks = [CodeChunk.from_document_chunk(chunk) for chunk in context.chunks]
        return SearchCodeResult(
            success=True,
            query=query,
            chunks=chunks,
            message=f"Found {len(chunks)} relevant code chunks",
        )
