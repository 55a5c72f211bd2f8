from typing import Callable, Dict

from ..config.settings import EmbeddingConfig, RerankingStrategyType
from ..embeddings.base import Embedder
from .base import Reranker
from .contextual import OllamaContextualReranker
from .strategies import (
    AdaptiveThresholdReranker,
    MMRReranker,
    MultiCriteriaReranker,
    NoFilterReranker,
    ScoreGapReranker,
    ThresholdReranker,
)

RerankerBuilder = Callable[[EmbeddingConfig, Embedder], Reranker]

_BUILDERS: Dict[RerankingStrategyType, RerankerBuilder] = {
    RerankingStrategyType.NONE: lambda config, embedder: NoFilterReranker(),
    RerankingStrategyType.THRESHOLD: lambda config, embedder: ThresholdReranker(
        threshold=config.similarity_threshold,
    ),
    RerankingStrategyType.ADAPTIVE: lambda config, embedder: AdaptiveThresholdReranker(
        ratio=config.adaptive_threshold_ratio,
    ),
    RerankingStrategyType.SCORE_GAP: lambda config, embedder: ScoreGapReranker(
        max_gap=config.score_gap_threshold,
    ),
    RerankingStrategyType.MMR: lambda config, embedder: MMRReranker(
        lambda_=config.mmr_lambda,
        max_results=config.mmr_max_results,
    ),
    RerankingStrategyType.MULTI_CRITERIA: lambda config, embedder: MultiCriteriaReranker(
        min_similarity=config.multi_criteria_min_similarity,
        min_content_length=config.multi_criteria_min_content_length,
        prefer_functions=config.multi_criteria_prefer_functions,
    ),
    RerankingStrategyType.OLLAMA_CONTEXTUAL_EMBEDDINGS: lambda config, embedder: OllamaContextualReranker(
        embedder=embedder,
        top_k=config.ollama_rerank_top_k,
        truncate_chunks=config.ollama_rerank_truncate_chunks,
        max_chunk_length=config.ollama_rerank_max_chunk_length,
    ),
}


def create_reranker(config: EmbeddingConfig, embedder: Embedder) -> Reranker:
    """Create the reranker selected by config.reranking_strategy.

    Args:
        config: Embedding configuration with the strategy and its parameters
        embedder: Embedding backend (used only by the contextual strategy)

    Returns:
        Reranker instance
    """
    strategy = RerankingStrategyType(config.reranking_strategy)
    try:
        builder = _BUILDERS[strategy]
    except KeyError:
        raise ValueError(f"Unknown reranking strategy: {config.reranking_strategy}") from None
    return builder(config, embedder)
