"""Score-based reranking strategies.

All strategies here work on the similarity scores and chunk content alone,
without calling the embedding backend.
"""

import re
from typing import Dict, FrozenSet, List

from ..models.chunk import ChunkType
from ..models.index import SearchResult
from .base import Reranker, sort_by_score

_WORD_SPLIT = re.compile(r"\W+")

FUNCTION_BOOST = 1.2
NAMED_SYMBOL_BOOST = 1.1


class NoFilterReranker(Reranker):
    """Returns results unchanged. Baseline for comparing strategies."""

    @property
    def name(self) -> str:
        return "no-filter"

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        return list(results)


class ThresholdReranker(Reranker):
    """Keeps results whose similarity is at least a fixed threshold."""

    def __init__(self, threshold: float = 0.3):
        self.threshold = threshold

    @property
    def name(self) -> str:
        return f"threshold-{self.threshold}"

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        return [r for r in results if r.similarity >= self.threshold]


class AdaptiveThresholdReranker(Reranker):
    """Keeps results within ``ratio`` of the best score.

    With scores [0.9, 0.75, 0.5] and ratio 0.8 the cutoff is 0.72, so the
    first two results survive.
    """

    def __init__(self, ratio: float = 0.8):
        self.ratio = ratio

    @property
    def name(self) -> str:
        return f"adaptive-{self.ratio}"

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        if not results:
            return []
        cutoff = max(r.similarity for r in results) * self.ratio
        return [r for r in sort_by_score(results) if r.similarity >= cutoff]


class ScoreGapReranker(Reranker):
    """Cuts the ranked list at the first drop larger than ``max_gap``.

    The top result is always kept.
    """

    def __init__(self, max_gap: float = 0.15):
        self.max_gap = max_gap

    @property
    def name(self) -> str:
        return f"score-gap-{self.max_gap}"

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        ranked = sort_by_score(results)
        if not ranked:
            return []

        kept = [ranked[0]]
        for result in ranked[1:]:
            if kept[-1].similarity - result.similarity > self.max_gap:
                break
            kept.append(result)
        return kept


class MMRReranker(Reranker):
    """Maximal Marginal Relevance.

    Starts from the most similar result, then repeatedly picks the candidate
    maximizing ``lambda * similarity - (1 - lambda) * redundancy``, where
    redundancy is the highest Jaccard word overlap with anything already
    selected.
    """

    def __init__(self, lambda_: float = 0.7, max_results: int = 10):
        self.lambda_ = lambda_
        self.max_results = max_results

    @property
    def name(self) -> str:
        return f"mmr-lambda{self.lambda_}"

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        remaining = sort_by_score(results)
        if not remaining or self.max_results <= 0:
            return []

        words: Dict[str, FrozenSet[str]] = {r.chunk.id: word_set(r.chunk.content) for r in remaining}
        selected = [remaining.pop(0)]

        while remaining and len(selected) < self.max_results:
            best_index = 0
            best_score = float("-inf")
            for index, candidate in enumerate(remaining):
                redundancy = max(
                    jaccard_similarity(words[candidate.chunk.id], words[s.chunk.id]) for s in selected
                )
                score = self.lambda_ * candidate.similarity - (1 - self.lambda_) * redundancy
                # Strict comparison: on equal MMR scores the better-ranked candidate wins
                if score > best_score:
                    best_index = index
                    best_score = score
            selected.append(remaining.pop(best_index))

        return selected


class MultiCriteriaReranker(Reranker):
    """Filters on similarity and content length, then sorts by a boosted score.

    The composite score is the similarity multiplied by 1.2 for FUNCTION
    chunks (when ``prefer_functions`` is set) and by a further 1.1 when the
    chunk names a function or class. Returned results keep their original
    similarity.
    """

    def __init__(
        self,
        min_similarity: float = 0.3,
        min_content_length: int = 50,
        prefer_functions: bool = True,
    ):
        self.min_similarity = min_similarity
        self.min_content_length = min_content_length
        self.prefer_functions = prefer_functions

    @property
    def name(self) -> str:
        return "multi-criteria"

    def composite_score(self, result: SearchResult) -> float:
        score = result.similarity
        metadata = result.chunk.metadata
        if self.prefer_functions and metadata.chunk_type == ChunkType.FUNCTION:
            score *= FUNCTION_BOOST
        if metadata.function_name or metadata.class_name:
            score *= NAMED_SYMBOL_BOOST
        return score

    async def rerank(self, query: str, results: List[SearchResult]) -> List[SearchResult]:
        eligible = [
            r for r in results
            if r.similarity >= self.min_similarity and len(r.chunk.content) >= self.min_content_length
        ]
        return sort_by_score(eligible, self.composite_score)


def word_set(text: str) -> FrozenSet[str]:
    """Lowercase words of a text, split on non-word characters."""
    return frozenset(w for w in _WORD_SPLIT.split(text.lower()) if w)


def jaccard_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    """|a & b| / |a | b|; 0.0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)
