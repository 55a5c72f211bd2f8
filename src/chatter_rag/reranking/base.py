from abc import ABC, abstractmethod
from typing import Callable, List

from ..models.index import SearchResult


class Reranker(ABC):
    """Abstract base class for result reranking.

    A reranker is a pure function of ``(query, results)`` and its own fixed
    parameters. It carries no state between calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name reported in reranking diagnostics."""

    @abstractmethod
    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        """Filter and/or reorder search results for a query.

        Args:
            query: Search query
            results: Raw similarity results, no threshold applied yet

        Returns:
            Final results, best first
        """
        pass


def sort_by_score(
    results: List[SearchResult],
    score: Callable[[SearchResult], float] = lambda r: r.similarity,
) -> List[SearchResult]:
    """Sort descending by score; equal scores keep their original rank order."""
    return sorted(results, key=lambda r: (-score(r), r.rank))
