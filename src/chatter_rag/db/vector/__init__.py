from chatter_rag.db.vector.base import IndexStore, sanitize_repository_name
from chatter_rag.db.vector.file_store import FileIndexStore

__all__ = ["FileIndexStore", "IndexStore", "sanitize_repository_name"]
