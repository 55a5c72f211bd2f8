"""Tests for reranker selection from configuration."""

import pytest

from chatter_rag.config.settings import RerankingStrategyType
from chatter_rag.reranking import Reranker, create_reranker
from chatter_rag.reranking.contextual import OllamaContextualReranker
from chatter_rag.reranking.strategies import MMRReranker, MultiCriteriaReranker


@pytest.mark.parametrize("strategy", list(RerankingStrategyType))
def test_every_strategy_has_a_reranker(config, fake_embedder, strategy):
    reranker = create_reranker(config.model_copy(update={"reranking_strategy": strategy}), fake_embedder)

    assert isinstance(reranker, Reranker)


@pytest.mark.parametrize("strategy,expected_name", [
    (RerankingStrategyType.NONE, "no-filter"),
    (RerankingStrategyType.THRESHOLD, "threshold-0.3"),
    (RerankingStrategyType.ADAPTIVE, "adaptive-0.8"),
    (RerankingStrategyType.SCORE_GAP, "score-gap-0.15"),
    (RerankingStrategyType.MMR, "mmr-lambda0.7"),
    (RerankingStrategyType.MULTI_CRITERIA, "multi-criteria"),
    (RerankingStrategyType.OLLAMA_CONTEXTUAL_EMBEDDINGS, "ollama-contextual-embeddings"),
])
def test_default_names(config, fake_embedder, strategy, expected_name):
    reranker = create_reranker(config.model_copy(update={"reranking_strategy": strategy}), fake_embedder)

    assert reranker.name == expected_name


def test_parameters_come_from_config(config, fake_embedder):
    mmr = create_reranker(
        config.model_copy(update={
            "reranking_strategy": RerankingStrategyType.MMR,
            "mmr_lambda": 0.4,
            "mmr_max_results": 3,
        }),
        fake_embedder,
    )
    multi = create_reranker(
        config.model_copy(update={
            "reranking_strategy": RerankingStrategyType.MULTI_CRITERIA,
            "multi_criteria_min_content_length": 10,
            "multi_criteria_prefer_functions": False,
        }),
        fake_embedder,
    )
    contextual = create_reranker(
        config.model_copy(update={
            "reranking_strategy": RerankingStrategyType.OLLAMA_CONTEXTUAL_EMBEDDINGS,
            "ollama_rerank_top_k": 4,
        }),
        fake_embedder,
    )

    assert isinstance(mmr, MMRReranker)
    assert (mmr.lambda_, mmr.max_results) == (0.4, 3)
    assert isinstance(multi, MultiCriteriaReranker)
    assert (multi.min_content_length, multi.prefer_functions) == (10, False)
    assert isinstance(contextual, OllamaContextualReranker)
    assert contextual.top_k == 4
    assert contextual.embedder is fake_embedder


def test_strategy_from_string(config, fake_embedder):
    reranker = create_reranker(config.model_copy(update={"reranking_strategy": "SCORE_GAP"}), fake_embedder)

    assert reranker.name == "score-gap-0.15"
