"""
Vector index retriever implementation.

This module implements VectorRetriever which:
- Embeds the (expanded) query
- Issues a top-k similarity search against one namespace of the vector index
- Deduplicates hits from the same source document
- Assigns citation indices in first-appearance order

Implements RetrieverInterface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from rag_chat.providers.embeddings import Embedder
from rag_chat.providers.vector_store import VectorSearchBackend
from rag_chat.retrieval.base_retriever import RetrieverInterface
from rag_chat.schema.excerpt import RetrievalResult, RetrievedExcerpt, SearchHit
from rag_chat.utils.helpers import truncate
from rag_chat.utils.logger import logger


@dataclass
class _SourceEntry:
    citation_index: int
    source_id: str
    score: float
    metadata: Dict[str, Any]
    passages: List[str] = field(default_factory=list)


class CitationAccumulator:
    """
    Fold over ranked hits: seen source -> citation index.

    The first hit of a source fixes its citation index (next free integer,
    starting at 1) and its score; later distinct passages of the same source
    are attached to that entry, identical passages are dropped. Feeding the
    same ranked list twice yields the same assignment.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _SourceEntry] = {}
        self._next_index = 1

    def add(self, hit: SearchHit) -> None:
        text = (hit.text or "").strip()
        if not text:
            return
        entry = self._entries.get(hit.source_id)
        if entry is None:
            entry = _SourceEntry(
                citation_index=self._next_index,
                source_id=hit.source_id,
                score=hit.score,
                metadata=dict(hit.metadata),
            )
            self._entries[hit.source_id] = entry
            self._next_index += 1
        if text not in entry.passages:
            entry.passages.append(text)

    def extend(self, hits: Iterable[SearchHit]) -> "CitationAccumulator":
        for hit in hits:
            self.add(hit)
        return self

    def excerpts(self) -> List[RetrievedExcerpt]:
        ordered = sorted(self._entries.values(), key=lambda e: e.citation_index)
        return [
            RetrievedExcerpt(
                citation_index=e.citation_index,
                source_id=e.source_id,
                text="\n...\n".join(e.passages),
                score=e.score,
                metadata=e.metadata,
            )
            for e in ordered
        ]


def assign_citations(hits: Iterable[SearchHit]) -> List[RetrievedExcerpt]:
    """Deduplicate ranked hits by source and number them [1], [2], ..."""
    ranked = sorted(hits, key=lambda h: h.score, reverse=True)
    return CitationAccumulator().extend(ranked).excerpts()


class VectorRetriever(RetrieverInterface):
    """
    Retriever for querying the vector index.

    Responsibilities:
    - Embed the query through the Embedder
    - Search the configured namespace through the VectorSearchBackend
    - Return cited excerpts, or an empty faulted result if a backend fails
    """

    def __init__(
        self,
        embedder: Embedder,
        vector_search: VectorSearchBackend,
        namespace: str,
        top_k: int = 5,
    ) -> None:
        self.embedder = embedder
        self.vector_search = vector_search
        self.namespace = namespace
        self.top_k = top_k
        self.logger = logger

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> RetrievalResult:
        if not self.validate_query(query):
            self.logger.warning("[VectorRetriever] Invalid query: query must be a non-empty string")
            return RetrievalResult.failed("Invalid query: query must be a non-empty string")

        top_k = top_k or self.top_k
        self.logger.debug(
            f"[VectorRetriever] Retrieving for query: '{truncate(query, 50)}' "
            f"(top_k={top_k}, namespace={self.namespace})"
        )

        try:
            embedding = await self.embedder.embed(query)
            hits = await self.vector_search.search(embedding, top_k, self.namespace)
        except Exception as e:
            error_msg = f"Error retrieving excerpts: {str(e)}"
            self.logger.warning(f"[VectorRetriever] {error_msg}")
            return RetrievalResult.failed(error_msg)

        excerpts = assign_citations(hits)
        self.logger.info(
            f"[VectorRetriever] Retrieved {len(hits)} hits from {len(excerpts)} sources"
        )
        return RetrievalResult(excerpts=excerpts)

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "retriever_type": "VectorRetriever",
            "namespace": self.namespace,
            "top_k": self.top_k,
            "capabilities": [
                "semantic_search",
                "source_deduplication",
                "citation_numbering",
            ],
        }
