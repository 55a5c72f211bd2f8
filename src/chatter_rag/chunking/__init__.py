"""File chunking strategies (code-aware, markdown, plain text)."""

from chatter_rag.chunking.base import Chunker, detect_file_type, detect_language
from chatter_rag.chunking.code_aware import CodeAwareChunker
from chatter_rag.chunking.factory import chunk_file, get_chunker
from chatter_rag.chunking.markdown import MarkdownChunker
from chatter_rag.chunking.plain_text import PlainTextChunker

__all__ = [
    "Chunker",
    "CodeAwareChunker",
    "MarkdownChunker",
    "PlainTextChunker",
    "chunk_file",
    "detect_file_type",
    "detect_language",
    "get_chunker",
]
