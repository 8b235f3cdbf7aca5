"""
Retrieval data structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SearchHit:
    """One raw hit returned by a vector search backend."""
    id: str
    text: str
    source_id: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RetrievedExcerpt:
    """
    A passage of source text with its citation index.

    Attributes:
        citation_index: 1-based [n] marker, assigned in first-appearance order
        source_id: Identifier of the source document
        text: Passage text (several passages of one source are joined)
        score: Relevance score of the best hit of this source
        metadata: Metadata of the best hit (title, url, ...)
    """
    citation_index: int
    source_id: str
    text: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RetrievalResult:
    """
    Outcome of a retrieval call.

    An empty result with fault=False means "no relevant context"; fault=True
    means the search backend was unavailable and the answer should be
    composed with the backup prompt.
    """
    excerpts: List[RetrievedExcerpt] = field(default_factory=list)
    fault: bool = False
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "RetrievalResult":
        return cls(excerpts=[], fault=True, error=error)

    def __len__(self) -> int:
        return len(self.excerpts)

    def __iter__(self):
        return iter(self.excerpts)

    def __bool__(self) -> bool:
        return bool(self.excerpts)
