"""Result models returned by the RAG orchestrator."""

from dataclasses import dataclass, field
from typing import List, Optional

from .chunk import DocumentChunk
from .index import SearchResult


@dataclass
class RerankingInfo:
    """Diagnostics describing what reranking did to a result set.

    Attributes:
        strategy_name: Name of the reranking strategy applied
        results_before: Number of candidates handed to the strategy
        results_after: Number of results kept after reranking and capping
    """
    strategy_name: str
    results_before: int
    results_after: int


@dataclass
class RAGContext:
    """Relevant context for a query.

    Attributes:
        available: False when RAG could not be used at all
        chunks: Final chunks, best first
        formatted_context: Markdown block ready to hand to an LLM
        reranking_info: Reranking diagnostics, None when no search ran
        results: Final results with their scores
    """
    available: bool
    chunks: List[DocumentChunk] = field(default_factory=list)
    formatted_context: str = ""
    reranking_info: Optional[RerankingInfo] = None
    results: List[SearchResult] = field(default_factory=list)


@dataclass
class RAGIndexingResult:
    """Outcome of an orchestrated indexing run."""
    success: bool
    message: str
    files_processed: int = 0
    chunks_indexed: int = 0
