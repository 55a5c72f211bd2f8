"""Utility modules for Chatter RAG."""

from chatter_rag.utils.debug import DebugLogger
from chatter_rag.utils.progress import (
    create_progress_bar,
    log_debug,
    log_error,
    log_info,
    log_success,
    log_warning,
    update_progress,
)
from chatter_rag.utils.vectors import (
    cosine_similarity,
    cosine_similarity_with_norms,
    l2_norm,
)

__all__ = [
    "DebugLogger",
    "create_progress_bar",
    "update_progress",
    "log_debug",
    "log_info",
    "log_warning",
    "log_error",
    "log_success",
    "cosine_similarity",
    "cosine_similarity_with_norms",
    "l2_norm",
]
