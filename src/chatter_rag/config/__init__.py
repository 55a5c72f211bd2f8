from .settings import EmbeddingConfig, RerankingStrategyType

__all__ = ["EmbeddingConfig", "RerankingStrategyType"]
