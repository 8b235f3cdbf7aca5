"""
Completion backends.

CompletionBackend is the only way agents talk to a language model:
complete(model, temperature, messages) -> text, or astream_complete(...)
for the same completion as text chunks. The production backend routes each
call to a named endpoint through a LangChain chat model: ChatOpenAI for
OpenAI-compatible endpoints, ChatAnthropic for Anthropic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from rag_chat.utils.exceptions import ConfigurationError, ProviderError
from rag_chat.utils.logger import logger

OPENAI_COMPATIBLE = "openai"
ANTHROPIC = "anthropic"


class CompletionBackend(ABC):
    """Abstract text-completion backend."""

    @abstractmethod
    async def complete(
        self,
        model: str,
        temperature: float,
        messages: Sequence[BaseMessage],
        provider: str = "openai",
    ) -> str:
        """
        Request a completion.

        Raises:
            ProviderError: If the backend call fails
        """

    async def astream_complete(
        self,
        model: str,
        temperature: float,
        messages: Sequence[BaseMessage],
        provider: str = "openai",
    ) -> AsyncIterator[str]:
        """
        Request a completion as text chunks, in order.

        Backends that cannot stream yield the whole completion once.

        Raises:
            ProviderError: If the backend call fails, before or mid-stream
        """
        text = await self.complete(model, temperature, messages, provider=provider)
        if text:
            yield text


@dataclass(frozen=True)
class Endpoint:
    """A chat endpoint; kind selects the LangChain client that serves it."""
    api_key: str
    base_url: Optional[str] = None
    default_headers: Dict[str, str] = field(default_factory=dict)
    kind: str = OPENAI_COMPATIBLE


def content_text(content: Any) -> str:
    """Flatten message content (a string or a list of content parts) to text."""
    if not content:
        return ""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


class LangChainCompletionBackend(CompletionBackend):
    """
    Completion backend built on LangChain chat models.

    One client is created lazily per (provider, model, temperature) and
    reused by every session; the clients hold no per-turn state.
    """

    def __init__(self, endpoints: Dict[str, Endpoint], max_retries: int = 0) -> None:
        if not endpoints:
            raise ConfigurationError("At least one completion endpoint is required")
        self._endpoints = dict(endpoints)
        self._max_retries = max_retries
        self._clients: Dict[Tuple[str, str, float], BaseChatModel] = {}
        self.logger = logger

    @property
    def providers(self) -> List[str]:
        return sorted(self._endpoints)

    def _build_client(self, endpoint: Endpoint, model: str, temperature: float) -> BaseChatModel:
        if endpoint.kind == ANTHROPIC:
            options: Dict[str, Any] = {}
            if endpoint.base_url:
                options["base_url"] = endpoint.base_url
            return ChatAnthropic(
                model=model,
                temperature=temperature,
                api_key=endpoint.api_key,
                default_headers=endpoint.default_headers or None,
                max_retries=self._max_retries,
                **options,
            )
        if endpoint.kind == OPENAI_COMPATIBLE:
            return ChatOpenAI(
                model=model,
                temperature=temperature,
                api_key=endpoint.api_key,
                base_url=endpoint.base_url,
                default_headers=endpoint.default_headers or None,
                max_retries=self._max_retries,
            )
        raise ConfigurationError(f"Unsupported endpoint kind {endpoint.kind!r}")

    def _client(self, provider: str, model: str, temperature: float) -> BaseChatModel:
        key = (provider, model, temperature)
        client = self._clients.get(key)
        if client is not None:
            return client

        endpoint = self._endpoints.get(provider)
        if endpoint is None:
            raise ConfigurationError(
                f"Unknown completion provider {provider!r}; known: {', '.join(self.providers)}"
            )
        try:
            client = self._build_client(endpoint, model, temperature)
        except ConfigurationError:
            raise
        except Exception as e:  # pragma: no cover - credentials dependent
            raise ProviderError(f"Failed to initialize model {model!r} on {provider!r}: {e}") from e

        self._clients[key] = client
        self.logger.info(f"[Completion] Initialized client for {provider}:{model} (t={temperature})")
        return client

    async def complete(
        self,
        model: str,
        temperature: float,
        messages: Sequence[BaseMessage],
        provider: str = "openai",
    ) -> str:
        client = self._client(provider, model, temperature)
        try:
            response = await client.ainvoke(list(messages))
        except Exception as e:
            raise ProviderError(f"Completion call to {provider}:{model} failed: {e}") from e

        # Extract text content from AIMessage object
        if hasattr(response, "content"):
            return content_text(response.content)
        return str(response)

    async def astream_complete(
        self,
        model: str,
        temperature: float,
        messages: Sequence[BaseMessage],
        provider: str = "openai",
    ) -> AsyncIterator[str]:
        client = self._client(provider, model, temperature)
        try:
            async for chunk in client.astream(list(messages)):
                text = content_text(chunk.content)
                if text:
                    yield text
        except Exception as e:
            raise ProviderError(f"Streaming call to {provider}:{model} failed: {e}") from e
