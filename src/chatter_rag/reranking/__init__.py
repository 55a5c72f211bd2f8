from .base import Reranker, sort_by_score
from .contextual import OllamaContextualReranker
from .factory import create_reranker
from .strategies import (
    AdaptiveThresholdReranker,
    MMRReranker,
    MultiCriteriaReranker,
    NoFilterReranker,
    ScoreGapReranker,
    ThresholdReranker,
)

__all__ = [
    'Reranker',
    'NoFilterReranker',
    'ThresholdReranker',
    'AdaptiveThresholdReranker',
    'ScoreGapReranker',
    'MMRReranker',
    'MultiCriteriaReranker',
    'OllamaContextualReranker',
    'create_reranker',
    'sort_by_score',
]
