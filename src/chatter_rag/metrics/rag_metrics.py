"""Counters describing how useful retrieval has been."""

import threading
from dataclasses import dataclass
from typing import List, Set

from ..models.chunk import DocumentChunk
from ..utils.progress import log_info, log_warning

# Searches returning less than this share of the requested chunks are reported
LOW_RETRIEVAL_RATIO = 0.5


@dataclass(frozen=True)
class RAGMetricsSummary:
    """Point-in-time snapshot of RAGMetrics with derived rates."""
    total_searches: int
    successful_searches: int
    success_rate: float
    avg_chunks_per_search: float
    total_chunks_requested: int
    total_chunks_returned: int
    retrieval_efficiency: float
    total_chunks_filtered_out: int
    filter_rate: float
    unique_files_retrieved: int
    unique_repositories_searched: int
    rag_available_count: int
    rag_unavailable_count: int
    tool_calls_with_rag: int
    tool_calls_without_rag: int
    tool_call_reduction: float


class RAGMetrics:
    """Thread-safe retrieval counters.

    One instance is owned by each RAGService; tests and callers read it
    through ``get_summary()``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._total_searches = 0
            self._successful_searches = 0
            self._chunks_requested = 0
            self._chunks_returned = 0
            self._chunks_filtered = 0
            self._unique_files: Set[str] = set()
            self._unique_repositories: Set[str] = set()
            self._available_count = 0
            self._unavailable_count = 0
            self._tool_calls_with_rag = 0
            self._tool_calls_without_rag = 0

    def record_search(
        self,
        repository_name: str,
        requested: int,
        returned: List[DocumentChunk],
        filtered_from: int,
    ) -> None:
        """Record one search.

        Args:
            repository_name: Repository searched
            requested: Number of chunks the caller asked for
            returned: Chunks handed back to the caller
            filtered_from: Number of candidates before reranking
        """
        with self._lock:
            self._total_searches += 1
            if returned:
                self._successful_searches += 1
            self._chunks_requested += requested
            self._chunks_returned += len(returned)
            self._chunks_filtered += max(0, filtered_from - len(returned))
            self._unique_repositories.add(repository_name)
            self._unique_files.update(chunk.metadata.file_path for chunk in returned)

        if len(returned) < requested * LOW_RETRIEVAL_RATIO:
            log_warning(
                f"Low retrieval rate: got {len(returned)} chunks out of {requested} requested "
                f"(filtered from {filtered_from})"
            )

    def record_availability(self, available: bool) -> None:
        with self._lock:
            if available:
                self._available_count += 1
            else:
                self._unavailable_count += 1

    def record_tool_calls(self, count: int, rag_was_available: bool) -> None:
        """Record tool calls an agent made with or without RAG context."""
        with self._lock:
            if rag_was_available:
                self._tool_calls_with_rag += count
            else:
                self._tool_calls_without_rag += count

    def get_summary(self) -> RAGMetricsSummary:
        with self._lock:
            searches = self._total_searches
            successful = self._successful_searches
            requested = self._chunks_requested
            returned = self._chunks_returned
            filtered = self._chunks_filtered
            with_rag = self._tool_calls_with_rag
            without_rag = self._tool_calls_without_rag

            return RAGMetricsSummary(
                total_searches=searches,
                successful_searches=successful,
                success_rate=successful / searches if searches else 0.0,
                avg_chunks_per_search=returned / searches if searches else 0.0,
                total_chunks_requested=requested,
                total_chunks_returned=returned,
                retrieval_efficiency=returned / requested if requested else 0.0,
                total_chunks_filtered_out=filtered,
                filter_rate=filtered / (filtered + returned) if filtered + returned else 0.0,
                unique_files_retrieved=len(self._unique_files),
                unique_repositories_searched=len(self._unique_repositories),
                rag_available_count=self._available_count,
                rag_unavailable_count=self._unavailable_count,
                tool_calls_with_rag=with_rag,
                tool_calls_without_rag=without_rag,
                tool_call_reduction=1.0 - with_rag / without_rag if without_rag else 0.0,
            )

    def log_summary(self) -> None:
        summary = self.get_summary()

        if summary.tool_calls_without_rag:
            reduction = summary.tool_call_reduction * 100
            if reduction > 0:
                reduction_text = f"{reduction:.1f}% reduction"
            elif reduction < 0:
                reduction_text = f"{-reduction:.1f}% increase"
            else:
                reduction_text = "no change"
        else:
            reduction_text = "N/A"

        log_info(
            "RAG Metrics Summary:\n"
            f"  Searches: {summary.total_searches} ({summary.successful_searches} successful, "
            f"{summary.success_rate * 100:.1f}%)\n"
            f"  Chunks: {summary.total_chunks_returned} returned / {summary.total_chunks_requested} requested "
            f"({summary.retrieval_efficiency * 100:.1f}% efficiency)\n"
            f"  Filtering: {summary.total_chunks_filtered_out} chunks filtered out "
            f"({summary.filter_rate * 100:.1f}% filter rate)\n"
            f"  Coverage: {summary.unique_files_retrieved} unique files from "
            f"{summary.unique_repositories_searched} repositories\n"
            f"  Availability: {summary.rag_available_count} available / "
            f"{summary.rag_unavailable_count} unavailable\n"
            f"  Avg chunks/search: {summary.avg_chunks_per_search:.1f}\n"
            f"  Tool calls: {summary.tool_calls_with_rag} with RAG / "
            f"{summary.tool_calls_without_rag} without RAG ({reduction_text})"
        )
