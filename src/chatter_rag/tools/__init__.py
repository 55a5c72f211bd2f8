from chatter_rag.tools.rag_tool import CodeChunk, SearchCodeResult, SemanticSearchTool

__all__ = ["CodeChunk", "SearchCodeResult", "SemanticSearchTool"]
