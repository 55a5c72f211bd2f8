from chatter_rag.rag.service import RAGService, format_context

__all__ = ["RAGService", "format_context"]
