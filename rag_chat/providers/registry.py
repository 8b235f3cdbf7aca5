"""
Provider registry.

Holds the handles every turn shares: the completion backend, the query
embedder and the vector search backend. Built once at startup, read-only
afterwards, safe to share across concurrent turns.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from rag_chat.config.settings import Config, config as default_config
from rag_chat.providers.completion import (
    ANTHROPIC,
    CompletionBackend,
    Endpoint,
    LangChainCompletionBackend,
)
from rag_chat.providers.embeddings import Embedder, OpenAIEmbedder
from rag_chat.providers.vector_store import ChromaSearchBackend, VectorSearchBackend
from rag_chat.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class ProviderRegistry:
    completion: CompletionBackend
    embedder: Embedder
    vector_search: VectorSearchBackend


def build_endpoints(cfg: Config) -> Dict[str, Endpoint]:
    """
    Chat endpoints by provider name.

    "openai" is served by OpenRouter. "fireworks" and "anthropic" are only
    registered when their API keys are configured.
    """
    if not cfg.OPENROUTER_API_KEY:
        raise ConfigurationError("OPENROUTER_API_KEY is not set")

    endpoints = {
        "openai": Endpoint(
            api_key=cfg.OPENROUTER_API_KEY,
            base_url=cfg.OPENROUTER_BASE_URL,
            default_headers={"HTTP-Referer": cfg.APP_REFERER, "X-Title": cfg.APP_TITLE},
        ),
    }
    if cfg.FIREWORKS_API_KEY:
        endpoints["fireworks"] = Endpoint(
            api_key=cfg.FIREWORKS_API_KEY,
            base_url=cfg.FIREWORKS_BASE_URL,
        )
    if cfg.ANTHROPIC_API_KEY:
        endpoints["anthropic"] = Endpoint(
            api_key=cfg.ANTHROPIC_API_KEY,
            base_url=cfg.ANTHROPIC_BASE_URL,
            kind=ANTHROPIC,
        )
    return endpoints


def build_registry(cfg: Optional[Config] = None) -> ProviderRegistry:
    cfg = cfg or default_config
    if not cfg.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY is not set (required for embeddings)")

    return ProviderRegistry(
        completion=LangChainCompletionBackend(build_endpoints(cfg)),
        embedder=OpenAIEmbedder(
            model_name=cfg.EMBEDDING_MODEL,
            api_key=cfg.OPENAI_API_KEY,
            api_base=cfg.EMBEDDING_API_BASE,
        ),
        vector_search=ChromaSearchBackend(Path(cfg.CHROMA_PERSIST_DIR)),
    )
