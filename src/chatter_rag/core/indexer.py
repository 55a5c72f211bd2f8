import asyncio
import os
import time
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from chatter_rag.chunking.factory import chunk_file
from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.db.vector.base import IndexStore
from chatter_rag.embeddings.base import Embedder
from chatter_rag.exceptions import EmbeddingBackendError, IndexStorageError
from chatter_rag.models.chunk import DocumentChunk
from chatter_rag.models.index import EmbeddingEntry, EmbeddingIndex, IndexingResult
from chatter_rag.utils.progress import (
    create_progress_bar,
    log_debug,
    log_error,
    log_info,
    log_success,
    log_warning,
    update_progress,
)
from chatter_rag.utils.vectors import l2_norm


def is_excluded(relative_path: str, exclude_patterns: Iterable[str]) -> bool:
    """Check a repository-relative posix path against exclude globs.

    The path is also tried with a leading "/" so that patterns written for
    nested directories ("*/build/*") match top-level ones as well.
    """
    anchored = f"/{relative_path}"
    return any(fnmatch(relative_path, p) or fnmatch(anchored, p) for p in exclude_patterns)


def find_eligible_files(
    root: Path,
    file_extensions: Iterable[str],
    exclude_patterns: Iterable[str],
) -> List[Tuple[Path, str]]:
    """Walk a repository and collect files worth indexing.

    Args:
        root: Repository root directory
        file_extensions: Allowed extensions including the dot (".py")
        exclude_patterns: Glob patterns matched against relative paths

    Returns:
        (absolute path, relative posix path) pairs in sorted path order
    """
    extensions = {ext.lower() for ext in file_extensions}
    patterns = list(exclude_patterns)
    eligible: List[Tuple[Path, str]] = []

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        # Prune excluded directories so large trees (node_modules, .git) are never walked
        dirnames[:] = sorted(d for d in dirnames if not is_excluded(f"{prefix}{d}/", patterns))

        for filename in sorted(filenames):
            relative = f"{prefix}{filename}"
            if Path(filename).suffix.lower() not in extensions:
                continue
            if is_excluded(relative, patterns):
                continue
            eligible.append((Path(dirpath) / filename, relative))

    eligible.sort(key=lambda item: item[1])
    return eligible


class ChunkBudget:
    """Repository-wide chunk ceiling shared by concurrent file tasks.

    ``reserve`` checks and increments under one lock, so concurrent tasks
    can never push the total past ``max_chunks``.
    """

    def __init__(self, max_chunks: int):
        self.max_chunks = max_chunks
        self._used = 0
        self._lock = asyncio.Lock()

    @property
    def used(self) -> int:
        return self._used

    @property
    def exhausted(self) -> bool:
        return self._used >= self.max_chunks

    async def reserve(self, requested: int) -> int:
        """Claim up to ``requested`` chunks; returns how many were granted (possibly 0)."""
        async with self._lock:
            granted = max(0, min(requested, self.max_chunks - self._used))
            self._used += granted
            return granted

    async def release(self, count: int) -> None:
        """Give back chunks that were reserved but not stored."""
        async with self._lock:
            self._used = max(0, self._used - count)


class Indexer:
    """Builds the embedding index of one repository.

    Files are read and chunked in path order while earlier files embed
    concurrently. Backend calls are bounded by ``embedding_concurrency`` and
    the repository-wide chunk count by a shared ChunkBudget; reading stops
    once the budget is spent. A failing file or chunk is logged and skipped.
    """

    def __init__(self, config: EmbeddingConfig, embedder: Embedder, store: IndexStore):
        """Create a new Indexer.

        Args:
            config: Embedding configuration (file selection, limits, chunking).
            embedder: Embedding provider instance.
            store: Index storage backend.
        """
        self.config = config
        self.embedder = embedder
        self.store = store

    async def index_repository(self, repository_path: Path, repository_name: str) -> IndexingResult:
        """Index a repository, replacing any previous index for it.

        Args:
            repository_path: Root directory of the repository checkout
            repository_name: Name the index is stored under

        Returns:
            IndexingResult; success is False when the path is missing, no file
            is eligible, the backend is unreachable, nothing could be embedded
            or the index cannot be stored
        """
        root = Path(repository_path)
        if not root.is_dir():
            return IndexingResult(success=False, error=f"Repository path does not exist: {root}")

        files = await asyncio.to_thread(
            find_eligible_files, root, self.config.file_extensions, self.config.exclude_patterns
        )
        if not files:
            return IndexingResult(success=False, error=f"No eligible files found in {root}")

        if self.config.max_files is not None and len(files) > self.config.max_files:
            log_info(f"Limiting indexing to {self.config.max_files} of {len(files)} eligible files")
            files = files[:self.config.max_files]

        if not await self.embedder.check_availability():
            return IndexingResult(success=False, error="Embedding backend is not available")

        log_info(f"Indexing {len(files)} files from {root} as '{repository_name}'")

        budget = ChunkBudget(self.config.max_chunks)
        semaphore = asyncio.Semaphore(self.config.embedding_concurrency)

        per_file: List[Optional[List[EmbeddingEntry]]] = []
        embed_tasks = []

        progress, task_id = create_progress_bar("Indexing files", total=len(files))
        with progress:
            async def embed_file(relative: str, chunks: List[DocumentChunk]) -> Optional[List[EmbeddingEntry]]:
                try:
                    return await self._embed_file(relative, chunks, budget, semaphore)
                finally:
                    update_progress(progress, task_id)

            # Files are read and reserved in path order so a capped index is
            # reproducible; embedding one file overlaps reading the next
            for path, relative in files:
                if budget.exhausted:
                    log_debug(f"Chunk limit reached; not reading {relative} or later files")
                    break

                chunks = await self._read_chunks(path, relative, repository_name)
                if not chunks:
                    per_file.append(chunks)
                    update_progress(progress, task_id)
                    continue

                granted = await budget.reserve(len(chunks))
                if granted == 0:
                    break
                embed_tasks.append(asyncio.create_task(embed_file(relative, chunks[:granted])))

            per_file.extend(await asyncio.gather(*embed_tasks))

        entries: List[EmbeddingEntry] = []
        files_processed = 0
        for file_entries in per_file:
            if file_entries is None:
                continue
            files_processed += 1
            entries.extend(file_entries)

        if not entries:
            return IndexingResult(
                success=False,
                files_processed=files_processed,
                error="No chunks could be indexed",
            )

        index = EmbeddingIndex(
            repository=repository_name,
            created_at=int(time.time() * 1000),
            model_name=self.embedder.model_name,
            entries=entries,
        )
        try:
            await asyncio.to_thread(self.store.save, index)
        except IndexStorageError as e:
            log_error(str(e))
            return IndexingResult(
                success=False,
                files_processed=files_processed,
                error=str(e),
            )

        if budget.exhausted:
            log_warning(f"Reached max_chunks limit ({self.config.max_chunks}); remaining content was not indexed")
        log_success(f"Indexed {len(entries)} chunks from {files_processed} files for '{repository_name}'")
        return IndexingResult(
            success=True,
            files_processed=files_processed,
            chunks_indexed=len(entries),
        )

    async def _read_chunks(
        self,
        path: Path,
        relative: str,
        repository_name: str,
    ) -> Optional[List[DocumentChunk]]:
        """Read and chunk one file; None if it cannot be read."""
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log_warning(f"Skipping unreadable file {relative}: {e}")
            return None

        return chunk_file(relative, content, repository_name, self.config)

    async def _embed_file(
        self,
        relative: str,
        chunks: List[DocumentChunk],
        budget: ChunkBudget,
        semaphore: asyncio.Semaphore,
    ) -> Optional[List[EmbeddingEntry]]:
        """Embed the reserved chunks of one file.

        Returns:
            The file's entries, or None if none of them could be embedded
        """
        embeddings = await asyncio.gather(*(self._embed_chunk(chunk, semaphore) for chunk in chunks))

        entries = [
            EmbeddingEntry(chunk=chunk, embedding=embedding, norm=l2_norm(embedding))
            for chunk, embedding in zip(chunks, embeddings)
            if embedding is not None
        ]

        failed = len(chunks) - len(entries)
        if failed:
            await budget.release(failed)
            log_warning(f"Failed to embed {failed} of {len(chunks)} chunks in {relative}")
        if not entries:
            return None

        log_debug(f"Embedded {len(entries)} chunks from {relative}")
        return entries

    async def _embed_chunk(self, chunk: DocumentChunk, semaphore: asyncio.Semaphore) -> Optional[List[float]]:
        async with semaphore:
            try:
                return await self.embedder.embed(chunk.content)
            except EmbeddingBackendError as e:
                log_debug(f"Embedding failed for {chunk.id}: {e}")
                return None
