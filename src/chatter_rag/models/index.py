"""Persistent index models and ephemeral search results."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .chunk import DocumentChunk


class EmbeddingEntry(BaseModel):
    """A chunk paired with its embedding and pre-computed L2 norm."""

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk
    embedding: List[float]
    norm: float = Field(..., ge=0.0)


class EmbeddingIndex(BaseModel):
    """All embedded chunks of one repository.

    Every entry is embedded with ``model_name``; mixing models would make
    similarity scores meaningless, so an index is replaced wholesale on
    re-indexing rather than updated.

    Attributes:
        repository: Repository name (unsanitized)
        created_at: Creation time in epoch milliseconds
        model_name: Embedding model used for every entry
        entries: Embedded chunks
    """

    repository: str
    created_at: int
    model_name: str
    entries: List[EmbeddingEntry] = Field(default_factory=list)


class SearchResult(BaseModel):
    """A chunk with its similarity to a query.

    Attributes:
        chunk: The matched chunk
        similarity: Cosine similarity to the query (or a refined score after reranking)
        rank: 1-based position in the initial similarity ordering
    """

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk
    similarity: float
    rank: int = Field(..., ge=1)


class IndexingResult(BaseModel):
    """Outcome of indexing one repository."""

    success: bool
    files_processed: int = 0
    chunks_indexed: int = 0
    error: Optional[str] = None
