"""Chunker selection by file path."""

from typing import List

from ..config.settings import EmbeddingConfig
from ..models.chunk import DocumentChunk
from .base import Chunker
from .code_aware import CodeAwareChunker
from .markdown import MarkdownChunker
from .plain_text import PlainTextChunker

# Checked in order; plain text accepts everything so it must stay last
_CHUNKERS: List[Chunker] = [
    CodeAwareChunker(),
    MarkdownChunker(),
    PlainTextChunker(),
]


def get_chunker(file_path: str) -> Chunker:
    """Return the most specific chunker for a file path."""
    for chunker in _CHUNKERS:
        if chunker.can_handle(file_path):
            return chunker
    return _CHUNKERS[-1]


def chunk_file(
    file_path: str,
    content: str,
    repository: str,
    config: EmbeddingConfig,
) -> List[DocumentChunk]:
    """Chunk a file's content with the chunker matching its path."""
    return get_chunker(file_path).chunk(file_path, content, repository, config)
