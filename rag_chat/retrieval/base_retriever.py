"""
Base retriever interface.

This module defines the RetrieverInterface using Dependency Inversion Principle.
All retrievers must implement this interface so the orchestrator can swap
retrieval strategies (or use a fake one in tests).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from rag_chat.schema.excerpt import RetrievalResult, RetrievedExcerpt


class RetrieverInterface(ABC):
    """
    Abstract interface for all retrievers (Dependency Inversion Principle).

    All retrievers must implement:
    - retrieve(): Query the index and return cited excerpts
    - get_metadata(): Return metadata about the retriever

    retrieve() never raises for backend failures: it returns an empty
    RetrievalResult with fault=True so the caller can pick the backup path.
    """

    @abstractmethod
    async def retrieve(self, query: str, top_k: Optional[int] = None) -> RetrievalResult:
        """
        Retrieve relevant excerpts for a query.

        Args:
            query: Search query string (hypothetical passage or raw message)
            top_k: Number of hits to request (None = use default)

        Returns:
            RetrievalResult: excerpts ordered by relevance with citation indices
        """
        pass

    @abstractmethod
    def get_metadata(self) -> Dict[str, Any]:
        """
        Get metadata about this retriever.

        Returns:
            Dict[str, Any]: Metadata including retriever_type, namespace, capabilities
        """
        pass

    def validate_query(self, query: str) -> bool:
        """
        Validate that a query is acceptable for retrieval.

        Args:
            query: Query string to validate

        Returns:
            bool: True if query is valid, False otherwise
        """
        if not query or not isinstance(query, str):
            return False
        if len(query.strip()) == 0:
            return False
        return True


def format_context(excerpts: List[RetrievedExcerpt]) -> str:
    """
    Render excerpts as the context block of the question prompt.

    Each excerpt is prefixed with its citation marker so the model can cite
    it as [n].
    """
    if not excerpts:
        return "No excerpts were found."

    lines = []
    for excerpt in excerpts:
        title = excerpt.metadata.get("title")
        source = f"{title} ({excerpt.source_id})" if title else excerpt.source_id
        lines.append(f"[{excerpt.citation_index}] (source: {source}) {excerpt.text.strip()}")
    return "\n\n".join(lines)
