"""
Vector search backends.

VectorSearchBackend.search(embedding, top_k, namespace) returns ranked
SearchHits. The ChromaDB implementation maps a namespace onto a collection
of the same name in a persistent client.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Sequence

import chromadb
from chromadb.config import Settings

from rag_chat.config.constants import METADATA_KEYS
from rag_chat.schema.excerpt import SearchHit
from rag_chat.utils.exceptions import ProviderError
from rag_chat.utils.logger import logger


class VectorSearchBackend(ABC):
    """Abstract similarity search over a vector index."""

    @abstractmethod
    async def search(self, embedding: Sequence[float], top_k: int, namespace: str) -> List[SearchHit]:
        """
        Return up to top_k hits ordered by descending relevance.

        Raises:
            ProviderError: If the index cannot be queried
        """


def hit_from_record(hit_id: str, document: str, metadata: Dict[str, Any], distance: float) -> SearchHit:
    """Map one ChromaDB record onto a SearchHit."""
    metadata = dict(metadata or {})
    text = document or metadata.get(METADATA_KEYS["text"], "") or ""
    source_id = (
        metadata.get(METADATA_KEYS["source_id"])
        or metadata.get(METADATA_KEYS["source"])
        or metadata.get(METADATA_KEYS["source_url"])
        or hit_id
    )
    return SearchHit(
        id=hit_id,
        text=text,
        source_id=str(source_id),
        score=1.0 - float(distance),
        metadata=metadata,
    )


class ChromaSearchBackend(VectorSearchBackend):
    """
    ChromaDB-backed search.

    The chromadb client is synchronous; queries run in a worker thread so a
    slow search does not block other sessions' turns.
    """

    def __init__(self, persist_directory: Path) -> None:
        self.persist_directory = Path(persist_directory)
        self.logger = logger
        try:
            self.persist_directory.mkdir(parents=True, exist_ok=True)
            self.chroma_client = chromadb.PersistentClient(
                path=str(self.persist_directory),
                settings=Settings(anonymized_telemetry=False),
            )
            self.logger.info(f"[VectorStore] Connected to ChromaDB at {self.persist_directory}")
        except Exception as e:
            error_msg = f"Error connecting to ChromaDB: {str(e)}"
            self.logger.error(error_msg)
            raise ProviderError(error_msg) from e

    async def search(self, embedding: Sequence[float], top_k: int, namespace: str) -> List[SearchHit]:
        return await asyncio.to_thread(self._search_sync, list(embedding), top_k, namespace)

    def _search_sync(self, embedding: List[float], top_k: int, namespace: str) -> List[SearchHit]:
        try:
            collection = self.chroma_client.get_collection(name=namespace)
            results = collection.query(
                query_embeddings=[embedding],
                n_results=top_k,
                include=["metadatas", "documents", "distances"],
            )
        except Exception as e:
            raise ProviderError(f"Vector search in namespace {namespace!r} failed: {e}") from e

        hits: List[SearchHit] = []
        if results and results.get("ids") and len(results["ids"][0]) > 0:
            documents = results.get("documents") or [[]]
            metadatas = results.get("metadatas") or [[]]
            distances = results.get("distances") or [[]]
            for i, hit_id in enumerate(results["ids"][0]):
                hits.append(hit_from_record(
                    hit_id,
                    documents[0][i] if i < len(documents[0]) else "",
                    metadatas[0][i] if i < len(metadatas[0]) else {},
                    distances[0][i] if i < len(distances[0]) else 1.0,
                ))

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits
