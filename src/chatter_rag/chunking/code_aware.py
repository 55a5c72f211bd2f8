"""Code-aware chunking that prefers function and class boundaries.

Blocks are found with lightweight pattern matching, not parsing: brace
counting for C-like languages and indentation for Python. Anything between
blocks (imports, top-level statements) is kept as CODE_BLOCK chunks so the
whole file stays covered. Languages without patterns fall back to
fixed-size line windows.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from ..config.settings import EmbeddingConfig
from ..models.chunk import ChunkType, DocumentChunk, FileType
from .base import (
    CODE_EXTENSIONS,
    ChunkBuilder,
    Chunker,
    detect_language,
    file_extension,
    sliding_windows,
    split_lines,
)

MODIFIERS = (
    r"(?:(?:public|private|protected|internal|fileprivate|static|final|abstract|open|"
    r"override|sealed|data|inline|suspend|inner|enum|annotation|partial|virtual|async|"
    r"export|default|extern|unsafe|const|synchronized|native|readonly|mutating|"
    r"operator|infix|tailrec|external|value|companion|pub(?:\([^)]*\))?)\s+)*"
)

CONTROL_KEYWORDS = r"(?:if|for|foreach|while|switch|catch|return|new|else|do|try|throw|case|sizeof|using|lock)\b"

CLASS_PATTERN = re.compile(
    rf"^\s*{MODIFIERS}(?:class|interface|object|struct|enum|trait|record|protocol|extension|impl)"
    rf"\s+(?:<[^>]*>\s*)?(?!func\b|var\b|let\b)([A-Za-z_]\w*)"
)
GO_TYPE_PATTERN = re.compile(r"^\s*type\s+([A-Za-z_]\w*)\s+(?:struct|interface)\b")

C_STYLE_FUNCTIONS = [
    re.compile(
        rf"^\s*{MODIFIERS}(?!{CONTROL_KEYWORDS})[\w<>\[\],.?*&:~]+\s+\**&?([A-Za-z_~][\w:~]*)\s*\([^;]*$"
    ),
    # Constructors: "public Foo(...) {"
    re.compile(r"^\s*(?:public|private|protected|internal)\s+([A-Z]\w*)\s*\([^;]*$"),
]

FUNCTION_PATTERNS: Dict[str, List[Pattern[str]]] = {
    "kotlin": [re.compile(rf"^\s*{MODIFIERS}fun\s+(?:<[^>]*>\s*)?(?:[\w.<>?]+\.)?([A-Za-z_]\w*)\s*\(")],
    "java": C_STYLE_FUNCTIONS,
    "csharp": C_STYLE_FUNCTIONS,
    "c": C_STYLE_FUNCTIONS,
    "cpp": C_STYLE_FUNCTIONS,
    "javascript": [
        re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)\s*[(<]"),
        re.compile(
            r"^\s*(?:export\s+)?(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*"
            r"(?:async\s+)?(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*(?::[^=]+)?=>"
        ),
    ],
    "go": [re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)\s*[(\[]")],
    "rust": [re.compile(rf"^\s*{MODIFIERS}fn\s+([A-Za-z_]\w*)")],
    "swift": [re.compile(rf"^\s*{MODIFIERS}func\s+([A-Za-z_]\w*)")],
    "scala": [re.compile(rf"^\s*{MODIFIERS}def\s+([A-Za-z_]\w*)")],
    "php": [re.compile(rf"^\s*{MODIFIERS}function\s+&?([A-Za-z_]\w*)\s*\(")],
}
FUNCTION_PATTERNS["typescript"] = FUNCTION_PATTERNS["javascript"]

CLASS_PATTERNS: Dict[str, List[Pattern[str]]] = {
    language: [CLASS_PATTERN] for language in FUNCTION_PATTERNS
}
CLASS_PATTERNS["go"] = [GO_TYPE_PATTERN]
CLASS_PATTERNS["c"] = [re.compile(r"^\s*(?:typedef\s+)?struct\s+([A-Za-z_]\w*)\s*\{?\s*$")]

PYTHON_BLOCK_PATTERN = re.compile(r"^(async\s+def|def|class)\s+([A-Za-z_]\w*)")

STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'')

# A line that continues a signature whose body brace has not appeared yet
CONTINUATION_PREFIXES = (")", "{", ":", ".", "->", "=", "throws", "extends", "implements", "where", "with", "<")
CONTINUATION_SUFFIXES = ("(", ",", "=", "->", ":", "<")


@dataclass
class SemanticBlock:
    """A function or class found in the source (0-based inclusive lines)."""
    start: int
    end: int
    chunk_type: ChunkType
    function_name: Optional[str] = None
    class_name: Optional[str] = None


def _code_only(line: str) -> str:
    """Strip string literals and line comments before counting braces."""
    code = STRING_LITERAL.sub('""', line)
    comment = code.find("//")
    return code[:comment] if comment >= 0 else code


class CodeAwareChunker(Chunker):
    """Chunks source code along function and class boundaries."""

    def can_handle(self, file_path: str) -> bool:
        return file_extension(file_path) in CODE_EXTENSIONS

    def chunk(
        self,
        file_path: str,
        content: str,
        repository: str,
        config: EmbeddingConfig,
    ) -> List[DocumentChunk]:
        language = detect_language(file_path) or "unknown"
        lines = split_lines(content)
        builder = ChunkBuilder(file_path, repository, lines, FileType.CODE, language)

        blocks = self.extract_blocks(lines, language)
        if not blocks:
            for start, end in sliding_windows(len(lines), config.chunk_size, config.chunk_overlap):
                builder.add(start, end - 1, ChunkType.CODE_BLOCK)
            return builder.build(config)

        position = 0
        for block in blocks:
            if block.start > position:
                builder.add_windowed(position, block.start - 1, ChunkType.CODE_BLOCK, config)
            builder.add_windowed(
                block.start,
                block.end,
                block.chunk_type,
                config,
                function_name=block.function_name,
                class_name=block.class_name,
            )
            position = block.end + 1

        if position < len(lines):
            builder.add_windowed(position, len(lines) - 1, ChunkType.CODE_BLOCK, config)

        return builder.build(config)

    def extract_blocks(self, lines: List[str], language: str) -> List[SemanticBlock]:
        """Find top-level functions and classes, in source order."""
        if language == "python":
            return self._extract_python_blocks(lines)
        if language in FUNCTION_PATTERNS:
            return self._extract_brace_blocks(lines, language)
        return []

    # Brace languages

    def _extract_brace_blocks(self, lines: List[str], language: str) -> List[SemanticBlock]:
        blocks: List[SemanticBlock] = []
        index = 0
        last_end = -1

        while index < len(lines):
            match = self._match_block_start(lines[index], language)
            if match is None:
                index += 1
                continue

            chunk_type, name = match
            start = index
            # Pull in annotations/attributes directly above the declaration
            while start - 1 > last_end and lines[start - 1].strip().startswith(("@", "#[")):
                start -= 1

            end = self._find_brace_block_end(lines, index)
            blocks.append(SemanticBlock(
                start=start,
                end=end,
                chunk_type=chunk_type,
                function_name=name if chunk_type == ChunkType.FUNCTION else None,
                class_name=name if chunk_type == ChunkType.CLASS else None,
            ))
            last_end = end
            index = end + 1

        return blocks

    @staticmethod
    def _match_block_start(line: str, language: str) -> Optional[Tuple[ChunkType, str]]:
        for pattern in CLASS_PATTERNS.get(language, []):
            match = pattern.match(line)
            if match:
                return ChunkType.CLASS, match.group(1)
        for pattern in FUNCTION_PATTERNS.get(language, []):
            match = pattern.match(line)
            if match:
                return ChunkType.FUNCTION, match.group(1)
        return None

    @staticmethod
    def _find_brace_block_end(lines: List[str], start: int) -> int:
        depth = 0
        seen_brace = False

        for index in range(start, len(lines)):
            code = _code_only(lines[index])

            if not seen_brace and index > start:
                stripped = lines[index].strip()
                if not stripped:
                    return index - 1
                previous = _code_only(lines[index - 1]).rstrip()
                continues = previous.endswith(CONTINUATION_SUFFIXES) or stripped.startswith(CONTINUATION_PREFIXES)
                if not continues:
                    # Declaration without a body (abstract member, expression body, one-line class)
                    return index - 1

            opens = code.count("{")
            if opens:
                seen_brace = True
            depth += opens - code.count("}")

            if seen_brace and depth <= 0:
                return index
            if not seen_brace and code.rstrip().endswith(";"):
                return index

        return len(lines) - 1

    # Python

    def _extract_python_blocks(self, lines: List[str]) -> List[SemanticBlock]:
        blocks: List[SemanticBlock] = []
        index = 0

        while index < len(lines):
            start = index
            # Decorators belong to the definition below them
            while index < len(lines) and lines[index].startswith("@"):
                index += 1
            if index >= len(lines):
                break

            match = PYTHON_BLOCK_PATTERN.match(lines[index])
            if match is None:
                index = max(index, start + 1)
                continue

            end = self._find_python_block_end(lines, index)
            name = match.group(2)
            is_class = match.group(1) == "class"
            blocks.append(SemanticBlock(
                start=start,
                end=end,
                chunk_type=ChunkType.CLASS if is_class else ChunkType.FUNCTION,
                function_name=None if is_class else name,
                class_name=name if is_class else None,
            ))
            index = end + 1

        return blocks

    @staticmethod
    def _find_python_block_end(lines: List[str], start: int) -> int:
        """Last non-blank line belonging to the definition starting at ``start``."""
        end = start
        for index in range(start + 1, len(lines)):
            line = lines[index]
            stripped = line.strip()
            if not stripped:
                continue
            indented = line[0] in (" ", "\t")
            # Closing brackets of a multi-line signature sit at column 0
            if indented or stripped[0] in ")]}":
                end = index
                continue
            break
        return end
