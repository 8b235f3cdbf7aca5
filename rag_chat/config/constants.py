"""
Constants and enumerations for the RAG chat assistant.

This module defines all application-wide constants including:
- Intent types
- Agent types
- Progress indicator icons
- Structured block types
- Error codes
"""

from enum import Enum


# ============================================================================
# INTENT TYPES
# ============================================================================

class Intent(str, Enum):
    """Closed set of intents produced by the intent classifier."""
    HOSTILE = "hostile"                          # Insults, abuse, threats
    SMALLTALK = "smalltalk"                      # Greetings, casual chat
    QUESTION = "question"                        # Informational, text-only answer
    STRUCTURED_QUESTION = "structured_question"  # Needs text + table + chart

    @classmethod
    def default(cls) -> "Intent":
        """Intent used whenever classification is uncertain or fails."""
        return cls.SMALLTALK

    @property
    def needs_retrieval(self) -> bool:
        return self in (Intent.QUESTION, Intent.STRUCTURED_QUESTION)


# Tokens the classifier model may emit for an intent, besides the value itself.
# "hostile_message" and "random" are the names used by earlier prompt versions.
INTENT_ALIASES = {
    "hostile_message": Intent.HOSTILE,
    "hostile": Intent.HOSTILE,
    "random": Intent.SMALLTALK,
    "small_talk": Intent.SMALLTALK,
    "smalltalk": Intent.SMALLTALK,
    "question": Intent.QUESTION,
    "structured_question": Intent.STRUCTURED_QUESTION,
}


# ============================================================================
# AGENT TYPES
# ============================================================================

class AgentType(Enum):
    """Enumeration for different agent types in the system."""
    INTENTION = "intention"    # Intent classifier
    HYDE = "hyde"              # Hypothetical document expander
    RESPONSE = "response"      # Response composer


# ============================================================================
# MODEL POLICIES
# ============================================================================

class ModelPolicy(Enum):
    """Configuration keys for per-policy model settings."""
    INTENT = "intent"
    RANDOM = "random"
    HOSTILE = "hostile"
    QUESTION = "question"
    HYDE = "hyde"
    STRUCTURED = "structured"


# ============================================================================
# PROGRESS INDICATORS
# ============================================================================

class IndicatorIcon(str, Enum):
    """Icon tags understood by the presentation layer."""
    UNDERSTANDING = "understanding"
    SEARCHING = "searching"
    DOCUMENTS = "documents"
    THINKING = "thinking"
    ERROR = "error"


# ============================================================================
# STRUCTURED ANSWER BLOCKS
# ============================================================================

class BlockType(str, Enum):
    TEXT = "text"
    TABLE = "table"
    CHART = "chart"


# Required block order for a structured answer
STRUCTURED_BLOCK_ORDER = (BlockType.TEXT, BlockType.TABLE, BlockType.CHART)


# ============================================================================
# COMPOSITION STATES
# ============================================================================

class CompositionState(str, Enum):
    """States of the structured answer composition."""
    DRAFTING = "drafting"
    RAW_RECEIVED = "raw_received"
    VALIDATED = "validated"
    DEGRADED_TEXT = "degraded_text"
    DONE = "done"


# ============================================================================
# ERROR CODES
# ============================================================================

class ErrorCode(Enum):
    """Enumeration for error codes."""
    CLASSIFICATION_ERROR = "CLASSIFICATION_ERROR"
    EXPANSION_ERROR = "EXPANSION_ERROR"
    RETRIEVAL_ERROR = "RETRIEVAL_ERROR"
    STRUCTURED_OUTPUT_ERROR = "STRUCTURED_OUTPUT_ERROR"
    COMPOSITION_ERROR = "COMPOSITION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    BACKUP_ERROR = "BACKUP_ERROR"


# ============================================================================
# VECTOR STORE
# ============================================================================

# Metadata keys read from vector search hits
METADATA_KEYS = {
    "text": "text",
    "source_id": "source_id",
    "source": "source",
    "source_url": "source_url",
    "title": "title",
}

DEFAULT_NAMESPACE = "knowledge_base"


# ============================================================================
# IDENTITY PROTECTION
# ============================================================================

# Vendor and model family names the assistant must not disclose in hostile
# replies. A version tail ("GPT-4o", "Qwen2.5-72b") is redacted with its family.
VENDOR_TERMS = (
    "OpenAI",
    "OpenRouter",
    "Anthropic",
    "Fireworks",
    "ChatGPT",
    "GPT",
    "Claude",
    "Qwen",
    "Alibaba",
    "Llama",
    "Meta AI",
    "Mistral",
    "Gemini",
)

# Final answer when even the backup completion cannot be produced
STATIC_APOLOGY = (
    "I'm sorry, I ran into a problem while answering. "
    "Please try again in a moment."
)
