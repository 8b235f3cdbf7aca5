"""
Retrieval system module.

This module provides retrievers for querying the vector index:
- RetrieverInterface: contract shared by all retrievers
- VectorRetriever: embeds the query, searches, deduplicates and cites
"""

from rag_chat.retrieval.base_retriever import RetrieverInterface, format_context
from rag_chat.retrieval.vector_retriever import CitationAccumulator, VectorRetriever, assign_citations

__all__ = [
    "RetrieverInterface",
    "format_context",
    "CitationAccumulator",
    "VectorRetriever",
    "assign_citations",
]
