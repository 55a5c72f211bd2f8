from chatter_rag.metrics.rag_metrics import RAGMetrics, RAGMetricsSummary

__all__ = ["RAGMetrics", "RAGMetricsSummary"]
