from .chunk import ChunkMetadata, ChunkType, DocumentChunk, FileType, make_chunk_id
from .context import RAGContext, RAGIndexingResult, RerankingInfo
from .index import EmbeddingEntry, EmbeddingIndex, IndexingResult, SearchResult
