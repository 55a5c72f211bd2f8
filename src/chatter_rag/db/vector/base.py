"""Abstract base class for repository index storage.

An index store persists one EmbeddingIndex per repository. Storage is keyed
by the sanitized repository name so that repositories never share entries.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional

from ...models.index import EmbeddingIndex

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def sanitize_repository_name(repository: str) -> str:
    """Make a repository name safe to use as a storage key.

    Every character outside ``[a-zA-Z0-9-_]`` becomes ``_``, so
    "owner/repo.git" maps to "owner_repo_git".
    """
    return _UNSAFE_CHARS.sub("_", repository)


class IndexStore(ABC):
    """Abstract base class for per-repository index persistence.

    Implementations are synchronous; async callers push them onto a worker
    thread with ``asyncio.to_thread``.
    """

    @abstractmethod
    def save(self, index: EmbeddingIndex) -> None:
        """Persist an index, replacing any previous index for the repository.

        Readers must never observe a partially written index.

        Raises:
            IndexStorageError: If the index cannot be written
        """
        pass

    @abstractmethod
    def load(self, repository: str) -> Optional[EmbeddingIndex]:
        """Load the index of a repository.

        Returns:
            The stored index, or None if the repository is not indexed

        Raises:
            IndexStorageError: If a stored index exists but cannot be read
        """
        pass

    @abstractmethod
    def exists(self, repository: str) -> bool:
        """Check whether an index owned by this repository is stored."""
        pass

    @abstractmethod
    def delete(self, repository: str) -> bool:
        """Delete the index of a repository.

        Returns:
            True if an index was deleted, False if none existed or the
            stored index belongs to a repository with the same storage key
        """
        pass

    @abstractmethod
    def list_repositories(self) -> List[str]:
        """List the storage keys (sanitized names) of all stored indices."""
        pass
