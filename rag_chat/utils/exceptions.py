"""
Custom exception classes for the RAG chat assistant.

This module defines a hierarchy of custom exceptions:
- Base exception class for the application
- Specific exception types for provider, agent and structured output failures
- Allows for fine-grained error handling throughout the system

Most of these never reach the caller of a turn: the orchestrator absorbs
them at the stage boundary and degrades the answer instead.
"""


class RagChatError(Exception):
    """
    Base exception class for all application-specific errors.

    All custom exceptions in this application inherit from this base class,
    allowing for catching all application errors with a single exception type
    while still maintaining specificity when needed.
    """
    pass


class ConfigurationError(RagChatError):
    """
    Raised when there's a configuration error.

    This exception is raised when:
    - Required environment variables are missing
    - Configuration values are invalid
    - A policy references an unknown provider
    """
    pass


class ProviderError(RagChatError):
    """
    Raised when an external backend (completion, embedding, vector search)
    cannot be reached or returns an unusable response.
    """
    pass


class AgentError(RagChatError):
    """
    Raised when there's an error in agent processing.

    This exception is raised by agents when:
    - LLM calls fail
    - Answer generation fails
    - Agent initialization fails
    """
    pass


class StructuredOutputError(RagChatError):
    """
    Raised when a structured completion cannot be turned into blocks.

    Attributes:
        stage: "parse" when the text is not JSON, "validate" when the JSON
               does not satisfy the block schema
        raw: The raw completion text
    """

    def __init__(self, message: str, stage: str, raw: str = ""):
        super().__init__(message)
        self.stage = stage
        self.raw = raw


class TurnTimeoutError(RagChatError):
    """Raised when a turn exceeds its wall-clock budget."""
    pass
