"""Sliding-window chunking for files without recognised structure."""

from typing import List

from ..config.settings import EmbeddingConfig
from ..models.chunk import ChunkType, DocumentChunk
from .base import ChunkBuilder, Chunker, detect_file_type, sliding_windows, split_lines


class PlainTextChunker(Chunker):
    """Fixed-size line windows with configurable overlap.

    Fallback for every file type. A file that fits in a single window becomes
    one FULL_DOCUMENT chunk; otherwise each window is a PARAGRAPH chunk.
    """

    def can_handle(self, file_path: str) -> bool:
        return True

    def chunk(
        self,
        file_path: str,
        content: str,
        repository: str,
        config: EmbeddingConfig,
    ) -> List[DocumentChunk]:
        lines = split_lines(content)
        builder = ChunkBuilder(file_path, repository, lines, detect_file_type(file_path))

        if len(lines) <= config.chunk_size:
            builder.add(0, len(lines) - 1, ChunkType.FULL_DOCUMENT)
            return builder.build(config)

        for start, end in sliding_windows(len(lines), config.chunk_size, config.chunk_overlap):
            builder.add(start, end - 1, ChunkType.PARAGRAPH)

        return builder.build(config)
