"""Configuration for embedding generation, indexing and RAG retrieval."""

from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Embedding backend defaults
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_EMBEDDING_MODEL = "zylonai/multilingual-e5-large"

DEFAULT_FILE_EXTENSIONS = frozenset({
    ".kt", ".java", ".py", ".js", ".ts", ".go", ".rs",
    ".md", ".txt", ".json", ".yaml", ".yml", ".xml",
})

DEFAULT_EXCLUDE_PATTERNS = frozenset({
    "*/build/*", "*/target/*", "*/node_modules/*",
    "*/.git/*", "*/.*",
})


class RerankingStrategyType(str, Enum):
    """Reranking strategy applied after the initial vector search."""

    # No filtering - returns all results (baseline for comparison)
    NONE = "NONE"
    # Keep results above a fixed similarity threshold
    THRESHOLD = "THRESHOLD"
    # Keep results within a ratio of the best score
    ADAPTIVE = "ADAPTIVE"
    # Stop at the first large drop between consecutive scores
    SCORE_GAP = "SCORE_GAP"
    # Maximal Marginal Relevance (relevance vs. diversity)
    MMR = "MMR"
    # Similarity + content length + chunk type
    MULTI_CRITERIA = "MULTI_CRITERIA"
    # Query-aware re-embedding through the embedding backend
    OLLAMA_CONTEXTUAL_EMBEDDINGS = "OLLAMA_CONTEXTUAL_EMBEDDINGS"


class EmbeddingConfig(BaseSettings):
    """Process-wide RAG settings.

    Loaded once (from keyword arguments, ``RAG_*`` environment variables or a
    ``.env`` file) and passed into every component constructor. Instances are
    frozen; build a new one with ``model_copy(update=...)`` to change values.
    """

    model_config = SettingsConfigDict(
        env_prefix="RAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    enabled: bool = False

    # Embedding backend
    embedding_provider: str = "ollama"
    ollama_base_url: str = DEFAULT_OLLAMA_BASE_URL
    model_name: str = DEFAULT_EMBEDDING_MODEL
    request_timeout: float = Field(default=30.0, gt=0)  # seconds per embedding call
    connect_timeout: float = Field(default=10.0, gt=0)

    # Chunking (in lines)
    chunk_size: int = Field(default=512, ge=1)
    chunk_overlap: int = Field(default=50, ge=0)

    # Indexing limits
    max_chunks: int = Field(default=5000, ge=1)  # Ceiling across the whole repository
    max_files: Optional[int] = Field(default=None, ge=1)  # None = no limit
    embedding_concurrency: int = Field(default=4, ge=1)

    # Retrieval
    retrieval_chunks: int = Field(default=20, ge=1)
    similarity_threshold: float = Field(default=0.3, ge=-1.0, le=1.0)
    candidate_multiplier: int = Field(default=3, ge=1)

    # Reranking
    reranking_strategy: RerankingStrategyType = RerankingStrategyType.NONE
    adaptive_threshold_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    score_gap_threshold: float = Field(default=0.15, ge=0.0)
    mmr_lambda: float = Field(default=0.7, ge=0.0, le=1.0)  # 1.0 = pure relevance, 0.0 = pure diversity
    mmr_max_results: int = Field(default=10, ge=1)
    multi_criteria_min_similarity: float = 0.3
    multi_criteria_min_content_length: int = Field(default=50, ge=0)
    multi_criteria_prefer_functions: bool = True

    # Contextual re-embedding (OLLAMA_CONTEXTUAL_EMBEDDINGS)
    ollama_rerank_top_k: int = Field(default=10, ge=1)
    ollama_rerank_truncate_chunks: bool = True
    ollama_rerank_max_chunk_length: int = Field(default=1000, ge=1)

    # File selection
    file_extensions: FrozenSet[str] = DEFAULT_FILE_EXTENSIONS
    exclude_patterns: FrozenSet[str] = DEFAULT_EXCLUDE_PATTERNS

    # Storage base directory
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".chatter-rag")

    # Debug settings
    debug: bool = False

    @model_validator(mode="after")
    def _check_overlap(self) -> "EmbeddingConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def storage_dir(self) -> Path:
        """Directory holding one index file per repository."""
        return self.data_dir / "indices"

    @property
    def debug_log_dir(self) -> Path:
        """Get the debug log directory."""
        return self.data_dir / "logs"
