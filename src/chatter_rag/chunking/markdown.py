"""Markdown chunking by header sections."""

import re
from typing import List

from ..config.settings import EmbeddingConfig
from ..models.chunk import ChunkType, DocumentChunk, FileType
from .base import MARKDOWN_EXTENSIONS, ChunkBuilder, Chunker, file_extension, split_lines

HEADER_PATTERN = re.compile(r"^ {0,3}#{1,6}(\s|$)")
FENCE_PATTERN = re.compile(r"^ {0,3}(```|~~~)")


class MarkdownChunker(Chunker):
    """Splits markdown into one SECTION chunk per header.

    Text before the first header becomes its own section. Headers inside
    fenced code blocks are ignored. Documents without any header are split
    into PARAGRAPH chunks on blank lines instead. Sections or paragraphs
    longer than chunk_size lines are windowed.
    """

    def can_handle(self, file_path: str) -> bool:
        return file_extension(file_path) in MARKDOWN_EXTENSIONS

    def chunk(
        self,
        file_path: str,
        content: str,
        repository: str,
        config: EmbeddingConfig,
    ) -> List[DocumentChunk]:
        lines = split_lines(content)
        builder = ChunkBuilder(file_path, repository, lines, FileType.MARKDOWN)

        header_lines = self._find_headers(lines)
        if not header_lines:
            self._chunk_paragraphs(builder, lines, config)
            return builder.build(config)

        boundaries = header_lines if header_lines[0] == 0 else [0] + header_lines
        boundaries.append(len(lines))
        for start, next_start in zip(boundaries, boundaries[1:]):
            builder.add_windowed(start, next_start - 1, ChunkType.SECTION, config)

        return builder.build(config)

    @staticmethod
    def _find_headers(lines: List[str]) -> List[int]:
        headers = []
        in_fence = False
        for index, line in enumerate(lines):
            if FENCE_PATTERN.match(line):
                in_fence = not in_fence
                continue
            if not in_fence and HEADER_PATTERN.match(line):
                headers.append(index)
        return headers

    @staticmethod
    def _chunk_paragraphs(builder: ChunkBuilder, lines: List[str], config: EmbeddingConfig) -> None:
        paragraph_start = None
        for index, line in enumerate(lines):
            if line.strip():
                if paragraph_start is None:
                    paragraph_start = index
            elif paragraph_start is not None:
                builder.add_windowed(paragraph_start, index - 1, ChunkType.PARAGRAPH, config)
                paragraph_start = None

        if paragraph_start is not None:
            builder.add_windowed(paragraph_start, len(lines) - 1, ChunkType.PARAGRAPH, config)
