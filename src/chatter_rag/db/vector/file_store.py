import json
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ...exceptions import IndexStorageError
from ...models.index import EmbeddingIndex
from ...utils.progress import log_debug, log_warning
from .base import IndexStore, sanitize_repository_name

INDEX_SUFFIX = ".json"

# Serialized indexes start with the repository field
_REPOSITORY_HEAD = re.compile(r'^\s*\{\s*"repository"\s*:\s*("(?:\\.|[^"\\])*")')
_HEAD_SIZE = 4096


class FileIndexStore(IndexStore):
    """Stores each repository index as one JSON document under a storage root.

    Two repository names can sanitize to the same file name. The repository
    recorded inside the file decides ownership: ``load``, ``exists`` and
    ``delete`` all ignore a file that belongs to another repository.
    """

    def __init__(self, storage_dir: Path):
        self.storage_dir = Path(storage_dir)

    def _index_path(self, repository: str) -> Path:
        return self.storage_dir / f"{sanitize_repository_name(repository)}{INDEX_SUFFIX}"

    def _stored_repository(self, path: Path) -> Optional[str]:
        """Repository name recorded in an index file, read without parsing its entries.

        Returns None when the file is missing, unreadable or not an index.
        """
        try:
            with path.open("r", encoding="utf-8") as f:
                head = f.read(_HEAD_SIZE)
        except (OSError, UnicodeDecodeError) as e:
            log_debug(f"Cannot read index head at {path}: {e}")
            return None

        match = _REPOSITORY_HEAD.match(head)
        if match is None:
            return None
        try:
            return json.loads(match.group(1))
        except ValueError:
            return None

    def _owner_if_other(self, path: Path, repository: str) -> Optional[str]:
        stored = self._stored_repository(path)
        if stored is not None and stored != repository:
            return stored
        return None

    def save(self, index: EmbeddingIndex) -> None:
        path = self._index_path(index.repository)
        other = self._owner_if_other(path, index.repository)
        if other is not None:
            log_warning(f"Replacing index of '{other}' at {path}; it shares a file name with '{index.repository}'")

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            # Write next to the target then rename so readers see old or new, never half
            fd, tmp_name = tempfile.mkstemp(
                dir=self.storage_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(index.model_dump_json())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise IndexStorageError(index.repository, str(e)) from e

        log_debug(f"Saved index for '{index.repository}' ({len(index.entries)} entries) to {path}")

    def load(self, repository: str) -> Optional[EmbeddingIndex]:
        path = self._index_path(repository)
        if not path.exists():
            return None

        try:
            index = EmbeddingIndex.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise IndexStorageError(repository, str(e)) from e
        except ValidationError as e:
            raise IndexStorageError(repository, f"corrupt index file {path}: {e}") from e

        if index.repository != repository:
            log_warning(
                f"Index at {path} belongs to '{index.repository}', not '{repository}'"
            )
            return None
        return index

    def exists(self, repository: str) -> bool:
        path = self._index_path(repository)
        return path.is_file() and self._stored_repository(path) == repository

    def delete(self, repository: str) -> bool:
        path = self._index_path(repository)
        other = self._owner_if_other(path, repository)
        if other is not None:
            log_warning(f"Not deleting {path}: it holds the index of '{other}'")
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise IndexStorageError(repository, str(e)) from e
        return True

    def list_repositories(self) -> List[str]:
        if not self.storage_dir.is_dir():
            return []
        return sorted(
            path.stem for path in self.storage_dir.glob(f"*{INDEX_SUFFIX}")
            if not path.name.startswith(".")
        )
