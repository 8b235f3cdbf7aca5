"""
Query embedding backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from llama_index.embeddings.openai import OpenAIEmbedding

from rag_chat.utils.exceptions import ProviderError
from rag_chat.utils.logger import logger


class Embedder(ABC):
    """Turns a query string into a vector."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Embed a query.

        Raises:
            ProviderError: If the embedding call fails
        """


class OpenAIEmbedder(Embedder):
    """Embedder backed by llama-index's OpenAIEmbedding."""

    def __init__(self, model_name: str, api_key: str, api_base: Optional[str] = None) -> None:
        self.model_name = model_name
        self.logger = logger
        try:
            kwargs = {"model_name": model_name, "api_key": api_key}
            if api_base:
                kwargs["api_base"] = api_base
            self._model = OpenAIEmbedding(**kwargs)
            self.logger.info(f"[Embedder] Initialized embedding model: {model_name}")
        except Exception as e:
            error_msg = f"Failed to initialize embedding model: {str(e)}"
            self.logger.error(error_msg)
            raise ProviderError(error_msg) from e

    async def embed(self, text: str) -> List[float]:
        try:
            return list(await self._model.aget_query_embedding(text))
        except Exception as e:
            raise ProviderError(f"Embedding call failed: {e}") from e
