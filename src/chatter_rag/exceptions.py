"""Custom exceptions for the RAG engine.

These are raised inside components and converted to structured result
objects (IndexingResult, RAGContext, SearchCodeResult) at component
boundaries, so none of them reach the calling agent.
"""


class RAGError(Exception):
    """Base exception for all RAG engine errors."""
    pass


class EmbeddingBackendError(RAGError):
    """Raised when the embedding backend is unreachable or returns garbage."""

    def __init__(self, message: str, base_url: str = None):
        """Initialize exception.

        Args:
            message: Description of the failure
            base_url: Backend URL that was being called, if known
        """
        self.base_url = base_url
        if base_url:
            message = f"{message} (backend: {base_url})"
        super().__init__(message)


class IndexStorageError(RAGError):
    """Raised when an index cannot be written to or read from storage."""

    def __init__(self, repository: str, reason: str):
        self.repository = repository
        self.reason = reason
        super().__init__(f"Index storage failed for repository '{repository}': {reason}")

