"""Document chunk models representing indexed slices of source files."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FileType(str, Enum):
    """Type of file being chunked."""

    CODE = "CODE"
    MARKDOWN = "MARKDOWN"
    PLAIN_TEXT = "PLAIN_TEXT"
    UNKNOWN = "UNKNOWN"


class ChunkType(str, Enum):
    """Semantic granularity of a chunk."""

    FUNCTION = "FUNCTION"
    CLASS = "CLASS"
    SECTION = "SECTION"
    PARAGRAPH = "PARAGRAPH"
    CODE_BLOCK = "CODE_BLOCK"
    FULL_DOCUMENT = "FULL_DOCUMENT"


class ChunkMetadata(BaseModel):
    """Provenance and extracted structure for a chunk.

    Attributes:
        file_path: Path of the file relative to the repository root
        file_name: Last path component of file_path
        file_type: Broad file category
        repository: Repository the chunk belongs to
        chunk_type: Semantic granularity tag
        language: Detected programming language, if any
        function_name: Function the chunk covers, if detected
        class_name: Class the chunk covers, if detected
    """

    model_config = ConfigDict(frozen=True)

    file_path: str
    file_name: str
    file_type: FileType
    repository: str
    chunk_type: ChunkType
    language: Optional[str] = None
    function_name: Optional[str] = None
    class_name: Optional[str] = None


class DocumentChunk(BaseModel):
    """A contiguous slice of a source file treated as one retrievable unit.

    Line numbers are 1-based and inclusive. ``content`` is exactly the source
    lines ``start_line..end_line`` joined with ``\\n``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    metadata: ChunkMetadata
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v:
            raise ValueError("Chunk content cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_line_range(self) -> "DocumentChunk":
        if self.start_line > self.end_line:
            raise ValueError(
                f"start_line ({self.start_line}) must not exceed end_line ({self.end_line})"
            )
        return self

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


def make_chunk_id(file_path: str, chunk_index: int, start_line: int, end_line: int) -> str:
    """Generate a stable chunk identifier.

    Format: "<file_path>:chunk_<index>:L<start>-<end>". Stable across
    re-indexing of unchanged content and unique within a repository.
    """
    return f"{file_path}:chunk_{chunk_index}:L{start_line}-{end_line}"
