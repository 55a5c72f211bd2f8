"""Chatter RAG - semantic code context for repository-aware agents."""

__version__ = "0.1.0"
