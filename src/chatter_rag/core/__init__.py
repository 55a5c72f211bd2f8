from chatter_rag.core.indexer import ChunkBudget, Indexer, find_eligible_files
from chatter_rag.core.searcher import Searcher
from chatter_rag.core.vector_store import VectorStore

__all__ = ["ChunkBudget", "Indexer", "Searcher", "VectorStore", "find_eligible_files"]
