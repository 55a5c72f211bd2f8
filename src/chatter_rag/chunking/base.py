"""Shared chunker contract and line-window helpers."""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple

from ..config.settings import EmbeddingConfig
from ..models.chunk import (
    ChunkMetadata,
    ChunkType,
    DocumentChunk,
    FileType,
    make_chunk_id,
)

CODE_EXTENSIONS = {
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".java": "java",
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".scala": "scala",
}

MARKDOWN_EXTENSIONS = (".md", ".markdown")
PLAIN_TEXT_EXTENSIONS = (".txt", ".rst")


def file_extension(file_path: str) -> str:
    name = file_name(file_path)
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


def file_name(file_path: str) -> str:
    return file_path.replace("\\", "/").rsplit("/", 1)[-1]


def detect_language(file_path: str) -> Optional[str]:
    """Programming language for a path, or None for non-code files."""
    return CODE_EXTENSIONS.get(file_extension(file_path))


def detect_file_type(file_path: str) -> FileType:
    ext = file_extension(file_path)
    if ext in MARKDOWN_EXTENSIONS:
        return FileType.MARKDOWN
    if ext in CODE_EXTENSIONS:
        return FileType.CODE
    if ext in PLAIN_TEXT_EXTENSIONS:
        return FileType.PLAIN_TEXT
    return FileType.UNKNOWN


def split_lines(content: str) -> List[str]:
    """Split file content into its lines.

    Lines are split on ``\\n`` only so that joining a slice with ``\\n``
    reproduces the source byte-for-byte (``\\r`` stays with its line). A
    single trailing newline does not produce an extra empty line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def sliding_windows(line_count: int, size: int, overlap: int) -> Iterator[Tuple[int, int]]:
    """Yield 0-based ``(start, end_exclusive)`` windows over ``line_count`` lines.

    Consecutive windows share ``overlap`` lines. The step is at least one
    line, and the last window always reaches the final line.
    """
    if line_count <= 0:
        return
    step = max(1, size - overlap)
    start = 0
    while True:
        end = min(start + size, line_count)
        yield start, end
        if end >= line_count:
            break
        start += step


class Chunker(ABC):
    """Splits one file's text into chunks."""

    @abstractmethod
    def can_handle(self, file_path: str) -> bool:
        """Check if this chunker understands the given file."""

    @abstractmethod
    def chunk(
        self,
        file_path: str,
        content: str,
        repository: str,
        config: EmbeddingConfig,
    ) -> List[DocumentChunk]:
        """Split document content into chunks.

        Args:
            file_path: Path of the file relative to the repository root
            content: Full file content
            repository: Repository name
            config: Embedding configuration (chunk size/overlap, limits)

        Returns:
            Ordered chunks; empty for empty or whitespace-only content
        """


class ChunkBuilder:
    """Accumulates chunks for one file, assigning ids in order.

    Line indexes passed in are 0-based and inclusive; the resulting chunks
    use 1-based inclusive line numbers. Whitespace-only ranges are dropped.
    """

    def __init__(self, file_path: str, repository: str, lines: List[str], file_type: FileType, language: Optional[str] = None):
        self.file_path = file_path
        self.repository = repository
        self.lines = lines
        self.file_type = file_type
        self.language = language
        self.chunks: List[DocumentChunk] = []

    def add(
        self,
        start: int,
        end: int,
        chunk_type: ChunkType,
        function_name: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> Optional[DocumentChunk]:
        content = "\n".join(self.lines[start:end + 1])
        if not content.strip():
            return None

        chunk = DocumentChunk(
            id=make_chunk_id(self.file_path, len(self.chunks), start + 1, end + 1),
            content=content,
            metadata=ChunkMetadata(
                file_path=self.file_path,
                file_name=file_name(self.file_path),
                file_type=self.file_type,
                repository=self.repository,
                chunk_type=chunk_type,
                language=self.language,
                function_name=function_name,
                class_name=class_name,
            ),
            start_line=start + 1,
            end_line=end + 1,
        )
        self.chunks.append(chunk)
        return chunk

    def add_windowed(
        self,
        start: int,
        end: int,
        chunk_type: ChunkType,
        config: EmbeddingConfig,
        function_name: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> None:
        """Add a range, splitting it into overlapping windows when it exceeds chunk_size."""
        length = end - start + 1
        if length <= config.chunk_size:
            self.add(start, end, chunk_type, function_name, class_name)
            return

        for window_start, window_end in sliding_windows(length, config.chunk_size, config.chunk_overlap):
            self.add(
                start + window_start,
                start + window_end - 1,
                chunk_type,
                function_name,
                class_name,
            )

    def build(self, config: EmbeddingConfig) -> List[DocumentChunk]:
        return self.chunks[:config.max_chunks]
