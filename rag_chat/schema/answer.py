"""
Turn results and the events emitted while a turn runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from rag_chat.config.constants import CompositionState, ErrorCode, Intent
from rag_chat.schema.blocks import StructuredAnswer
from rag_chat.schema.excerpt import RetrievedExcerpt
from rag_chat.schema.progress import ProgressIndicator


@dataclass
class ComposedAnswer:
    """
    Output of the response composer.

    Exactly one of text / structured is set. states records the composition
    state trail (structured answers only), degraded is True when a structured
    request ended as plain text.
    """
    text: Optional[str] = None
    structured: Optional[StructuredAnswer] = None
    states: List[CompositionState] = field(default_factory=list)
    degraded: bool = False
    used_backup_prompt: bool = False

    @property
    def is_structured(self) -> bool:
        return self.structured is not None


@dataclass
class TurnAnswer:
    """Final answer of a turn, as handed to the presentation layer."""
    intent: Intent
    text: Optional[str] = None
    structured: Optional[StructuredAnswer] = None
    excerpts: List[RetrievedExcerpt] = field(default_factory=list)
    faults: List[ErrorCode] = field(default_factory=list)
    degraded: bool = False

    @property
    def is_structured(self) -> bool:
        return self.structured is not None

    def to_payload(self) -> Union[str, Dict[str, Any]]:
        if self.structured is not None:
            return self.structured.to_payload()
        return self.text or ""


@dataclass(frozen=True)
class ProgressUpdate:
    indicators: Tuple[ProgressIndicator, ...]


@dataclass(frozen=True)
class TextChunk:
    """
    A piece of a plain-text answer, in order.

    restart is set on the first chunk of a fallback answer: chunks shown
    before it belonged to an answer that failed mid-stream and are dropped.
    The chunks since the last restart join to the final answer's text.
    """
    text: str
    restart: bool = False


@dataclass(frozen=True)
class FinalAnswer:
    answer: TurnAnswer


TurnEvent = Union[ProgressUpdate, TextChunk, FinalAnswer]
