"""Tests for plain-text chunking and chunker selection."""

import pytest

from chatter_rag.chunking import (
    CodeAwareChunker,
    MarkdownChunker,
    PlainTextChunker,
    chunk_file,
    get_chunker,
)
from chatter_rag.chunking.base import sliding_windows, split_lines
from chatter_rag.models.chunk import ChunkType, FileType


class TestPlainTextChunker:

    def test_small_file_is_full_document(self, config):
        chunks = PlainTextChunker().chunk("notes.txt", "a\nb\nc\n", "repo", config)

        assert len(chunks) == 1
        assert chunks[0].metadata.chunk_type == ChunkType.FULL_DOCUMENT
        assert chunks[0].metadata.file_type == FileType.PLAIN_TEXT
        assert chunks[0].content == "a\nb\nc"
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 3)

    def test_large_file_uses_overlapping_windows(self, config):
        content = "\n".join(f"row {i}" for i in range(20))

        chunks = PlainTextChunker().chunk("data.txt", content, "repo", config)

        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 10), (9, 18), (17, 20)]
        assert all(c.metadata.chunk_type == ChunkType.PARAGRAPH for c in chunks)

    def test_unknown_extension_file_type(self, config):
        chunks = PlainTextChunker().chunk("config.json", '{"a": 1}', "repo", config)

        assert chunks[0].metadata.file_type == FileType.UNKNOWN
        assert chunks[0].metadata.language is None

    def test_whitespace_windows_are_skipped(self, config):
        content = "start\n" + "\n" * 30 + "end"

        chunks = PlainTextChunker().chunk("gaps.txt", content, "repo", config)

        assert all(c.content.strip() for c in chunks)

    def test_per_file_output_is_capped(self, config):
        capped = config.model_copy(update={"chunk_size": 5, "chunk_overlap": 0, "max_chunks": 3})
        content = "\n".join(f"row {i}" for i in range(100))

        chunks = PlainTextChunker().chunk("long.txt", content, "repo", capped)

        assert len(chunks) == 3


class TestHelpers:

    def test_split_lines_drops_single_trailing_newline(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\nb\n\n") == ["a", "b", ""]
        assert split_lines("") == []

    def test_split_lines_keeps_carriage_returns(self):
        assert split_lines("a\r\nb") == ["a\r", "b"]

    def test_sliding_windows_reach_last_line(self):
        assert list(sliding_windows(25, 10, 2)) == [(0, 10), (8, 18), (16, 25)]

    def test_sliding_windows_always_advance(self):
        windows = list(sliding_windows(5, 2, 5))

        assert windows[-1][1] == 5
        assert len(windows) == 4


class TestChunkerSelection:

    @pytest.mark.parametrize("path, expected", [
        ("src/app.py", CodeAwareChunker),
        ("lib/Main.kt", CodeAwareChunker),
        ("README.md", MarkdownChunker),
        ("notes.txt", PlainTextChunker),
        ("settings.yaml", PlainTextChunker),
    ])
    def test_get_chunker(self, path, expected):
        assert isinstance(get_chunker(path), expected)


LINE_FIDELITY_SAMPLES = {
    "src/service.py": "import sys\n\n\nclass Service:\n    def run(self):\n        pass\n\n\ndef main():\n    Service().run()\n",
    "src/App.kt": "package app\n\nfun main() {\n    println(\"{\")\n}\n\nclass Empty\n",
    "docs/README.md": "# Title\n\nSome text\n\n## Usage\n\n```\ncode\n```\n",
    "notes.txt": "\n".join(f"line {i}" for i in range(37)),
    "windows.txt": "first\r\nsecond\r\n\r\nthird\r\n",
}


@pytest.mark.parametrize("file_path", sorted(LINE_FIDELITY_SAMPLES))
def test_chunk_content_matches_source_lines(file_path, config):
    """Every chunk is exactly the source lines start_line..end_line joined by newlines."""
    content = LINE_FIDELITY_SAMPLES[file_path]
    source_lines = content.split("\n")

    chunks = chunk_file(file_path, content, "repo", config)

    assert chunks
    for chunk in chunks:
        assert 1 <= chunk.start_line <= chunk.end_line <= len(source_lines)
        assert chunk.content == "\n".join(source_lines[chunk.start_line - 1:chunk.end_line])
