"""Vector math for cosine similarity search."""

from typing import Sequence

import numpy as np


def l2_norm(vector: Sequence[float]) -> float:
    """Euclidean length of a vector."""
    return float(np.linalg.norm(np.asarray(vector, dtype=np.float64)))


def cosine_similarity_with_norms(
    query: Sequence[float],
    query_norm: float,
    document: Sequence[float],
    document_norm: float,
) -> float:
    """Cosine similarity using norms computed ahead of time.

    Stored entries carry their norm from indexing time, so only the dot
    product is computed per comparison. Returns 0.0 when either vector has
    zero length.

    Raises:
        ValueError: If the vectors have different dimensions
    """
    if len(query) != len(document):
        raise ValueError(
            f"Embedding dimensions differ: {len(query)} vs {len(document)}"
        )
    if query_norm == 0.0 or document_norm == 0.0:
        return 0.0

    dot = float(np.dot(np.asarray(query, dtype=np.float64), np.asarray(document, dtype=np.float64)))
    return dot / (query_norm * document_norm)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors: dot(a, b) / (|a| * |b|)."""
    return cosine_similarity_with_norms(a, l2_norm(a), b, l2_norm(b))
