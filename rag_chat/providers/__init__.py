"""
External collaborators of the pipeline.

- CompletionBackend / LangChainCompletionBackend: chat completions
- Embedder / OpenAIEmbedder: query embeddings
- VectorSearchBackend / ChromaSearchBackend: similarity search
- ProviderRegistry / build_registry: the shared, read-only handles
"""

from rag_chat.providers.completion import CompletionBackend, Endpoint, LangChainCompletionBackend
from rag_chat.providers.embeddings import Embedder, OpenAIEmbedder
from rag_chat.providers.vector_store import ChromaSearchBackend, VectorSearchBackend
from rag_chat.providers.registry import ProviderRegistry, build_endpoints, build_registry

__all__ = [
    "CompletionBackend",
    "Endpoint",
    "LangChainCompletionBackend",
    "Embedder",
    "OpenAIEmbedder",
    "VectorSearchBackend",
    "ChromaSearchBackend",
    "ProviderRegistry",
    "build_endpoints",
    "build_registry",
]
