"""
Data model shared by all pipeline stages.

- Conversation / Message: caller-owned chat history
- SearchHit / RetrievedExcerpt / RetrievalResult: retrieval output
- TextBlock / TableBlock / ChartBlock / StructuredAnswer: structured answers
- ProgressIndicator / ProgressTracker: per-turn progress
- ComposedAnswer / TurnAnswer: turn results
- ProgressUpdate / TextChunk / FinalAnswer: events emitted while a turn runs
"""

from rag_chat.schema.conversation import Conversation, Message
from rag_chat.schema.excerpt import RetrievalResult, RetrievedExcerpt, SearchHit
from rag_chat.schema.blocks import (
    ChartBlock,
    StructuredAnswer,
    TableBlock,
    TableColumn,
    TextBlock,
)
from rag_chat.schema.progress import ProgressIndicator, ProgressTracker
from rag_chat.schema.answer import (
    ComposedAnswer,
    FinalAnswer,
    ProgressUpdate,
    TextChunk,
    TurnAnswer,
    TurnEvent,
)

__all__ = [
    "Conversation",
    "Message",
    "SearchHit",
    "RetrievedExcerpt",
    "RetrievalResult",
    "TextBlock",
    "TableBlock",
    "TableColumn",
    "ChartBlock",
    "StructuredAnswer",
    "ProgressIndicator",
    "ProgressTracker",
    "ComposedAnswer",
    "TurnAnswer",
    "ProgressUpdate",
    "TextChunk",
    "FinalAnswer",
    "TurnEvent",
]
