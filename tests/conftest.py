import asyncio
import hashlib
import re
from typing import List, Optional

import pytest

from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.embeddings.base import Embedder
from chatter_rag.exceptions import EmbeddingBackendError
from chatter_rag.models.chunk import ChunkMetadata, ChunkType, DocumentChunk, FileType
from chatter_rag.models.index import SearchResult


class DummyProgress:
    """
    Test-only no-op progress object to avoid Rich LiveError from Live/Progress.

    Matches the Progress API used by the indexer closely enough to stand in
    for Rich's Progress.
    """

    def __init__(self, *args, **kwargs):
        self.finished = False

    def add_task(self, *args, **kwargs):
        return "task-id"

    def update(self, *args, **kwargs):
        pass

    def advance(self, *args, **kwargs):
        pass

    def start(self):
        self.finished = False

    def stop(self):
        self.finished = True

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


@pytest.fixture(autouse=True)
def dummy_progress(monkeypatch):
    """
    Patch the Progress symbol used inside chatter_rag.utils.progress.create_progress_bar
    so tests never construct a real Rich Progress/Live instance.
    """
    from chatter_rag.utils import progress as progress_utils

    monkeypatch.setattr(progress_utils, "Progress", DummyProgress)
    yield


class FakeEmbedder(Embedder):
    """Deterministic bag-of-words embedder.

    Each lowercase word is hashed (md5, so stable across processes) into one
    of ``dimension`` buckets. Identical texts get identical vectors and texts
    sharing words get positive similarity.
    """

    def __init__(
        self,
        dimension: int = 256,
        available: bool = True,
        fail_on: Optional[str] = None,
        delay: float = 0.0,
    ):
        self.dimension = dimension
        self.available = available
        self.fail_on = fail_on
        self.fail_all = False
        self.delay = delay
        self.embed_calls: List[str] = []
        self.availability_checks = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def model_name(self) -> str:
        return "fake-embedder"

    async def check_availability(self) -> bool:
        self.availability_checks += 1
        await asyncio.sleep(0)
        return self.available

    async def embed(self, text: str) -> List[float]:
        self.embed_calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_all or (self.fail_on and self.fail_on in text):
                raise EmbeddingBackendError("simulated backend failure")
            return self.vector_for(text)
        finally:
            self.in_flight -= 1

    async def embed_batch(self, texts: List[str]) -> List[Optional[List[float]]]:
        embeddings: List[Optional[List[float]]] = []
        for text in texts:
            try:
                embeddings.append(await self.embed(text))
            except EmbeddingBackendError:
                embeddings.append(None)
        return embeddings

    async def close(self) -> None:
        self.closed = True

    def vector_for(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dimension
            vector[bucket] += 1.0
        return vector


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def config(tmp_path):
    """Small chunk sizes and a temporary data directory."""
    return EmbeddingConfig(
        enabled=True,
        data_dir=tmp_path / "data",
        chunk_size=10,
        chunk_overlap=2,
    )


@pytest.fixture
def make_chunk():
    """Factory for DocumentChunk instances with sensible defaults."""

    def _make_chunk(
        content: str = "def handler():\n    return 42",
        file_path: str = "src/app.py",
        repository: str = "repo",
        chunk_type: ChunkType = ChunkType.CODE_BLOCK,
        function_name: Optional[str] = None,
        class_name: Optional[str] = None,
        start_line: int = 1,
        chunk_id: Optional[str] = None,
        language: Optional[str] = "python",
    ) -> DocumentChunk:
        end_line = start_line + content.count("\n")
        return DocumentChunk(
            id=chunk_id or f"{file_path}:L{start_line}-{end_line}",
            content=content,
            metadata=ChunkMetadata(
                file_path=file_path,
                file_name=file_path.rsplit("/", 1)[-1],
                file_type=FileType.CODE,
                repository=repository,
                chunk_type=chunk_type,
                language=language,
                function_name=function_name,
                class_name=class_name,
            ),
            start_line=start_line,
            end_line=end_line,
        )

    return _make_chunk


@pytest.fixture
def make_result(make_chunk):
    """Factory for SearchResult instances; each rank gets its own chunk id."""

    def _make_result(similarity: float, rank: int, content: Optional[str] = None, **chunk_kwargs) -> SearchResult:
        chunk = make_chunk(
            content=content if content is not None else f"chunk number {rank}",
            chunk_id=f"src/app.py:chunk_{rank}",
            **chunk_kwargs,
        )
        return SearchResult(chunk=chunk, similarity=similarity, rank=rank)

    return _make_result


@pytest.fixture
def make_embedder():
    """Factory for FakeEmbedder instances with custom behaviour."""
    return FakeEmbedder
