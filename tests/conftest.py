"""
Pytest configuration and shared fixtures for tests.

Every fixture runs the real pipeline code against the in-memory backends
from tests/fakes.py, so no API keys or vector index are needed.
"""

import pytest
from typing import Callable, Dict, Optional, Tuple

from rag_chat.agents.orchestrator_system import OrchestratorSystem
from rag_chat.config.pipeline import AssistantIdentity, PipelineConfig
from rag_chat.helpers.bootstrap import init
from rag_chat.providers.registry import ProviderRegistry
from tests.fakes import FakeCompletionBackend, FakeEmbedder, FakeVectorSearch, make_hit


@pytest.fixture
def identity() -> AssistantIdentity:
    return AssistantIdentity(
        ai_name="Atlas",
        owner_name="Acme Labs",
        owner_description="Acme Labs builds documentation tooling.",
        ai_role="You answer questions about Acme Labs' knowledge base.",
        ai_tone="friendly and concise",
    )


@pytest.fixture
def pipeline_config(identity) -> PipelineConfig:
    """Default policies with short timeouts so timeout tests finish quickly."""
    return PipelineConfig(
        identity=identity,
        namespace="test_namespace",
        turn_timeout=2.0,
        backup_timeout=1.0,
    )


@pytest.fixture
def html_hits():
    return [
        make_hit("mdn-html", "HTML stands for HyperText Markup Language.", 0.92, title="HTML basics"),
        make_hit("whatwg-html", "The HTML standard is maintained by WHATWG.", 0.85),
        make_hit("mdn-html", "Elements are delimited by tags.", 0.80, title="HTML basics"),
    ]


@pytest.fixture
def completion() -> FakeCompletionBackend:
    return FakeCompletionBackend()


@pytest.fixture
def registry(completion, html_hits) -> ProviderRegistry:
    return ProviderRegistry(
        completion=completion,
        embedder=FakeEmbedder(),
        vector_search=FakeVectorSearch(html_hits),
    )


@pytest.fixture
def orchestrator(registry, pipeline_config) -> OrchestratorSystem:
    """
    OrchestratorSystem built through the same init() the CLI uses.

    Usage:
        async def test_something(orchestrator):
            answer = await orchestrator.submit_turn(Conversation.single("what is html"))
    """
    _, orchestrator_instance = init(pipeline_config=pipeline_config, registry=registry)
    return orchestrator_instance


@pytest.fixture
def build_orchestrator(pipeline_config, html_hits) -> Callable[..., Tuple]:
    """
    Factory for orchestrators with custom backend behaviour.

    Returns (orchestrator, completion, embedder, vector_search) so tests can
    inspect the calls each backend received.
    """

    def _build(
        responses: Optional[Dict] = None,
        delays: Optional[Dict[str, float]] = None,
        interruptions: Optional[Dict[str, BaseException]] = None,
        hits=None,
        search_error: Optional[Exception] = None,
        embed_error: Optional[Exception] = None,
        config: Optional[PipelineConfig] = None,
    ):
        completion = FakeCompletionBackend(responses, delays, interruptions)
        embedder = FakeEmbedder(embed_error)
        vector_search = FakeVectorSearch(html_hits if hits is None else hits, search_error)
        registry = ProviderRegistry(completion=completion, embedder=embedder, vector_search=vector_search)
        _, orchestrator_instance = init(pipeline_config=config or pipeline_config, registry=registry)
        return orchestrator_instance, completion, embedder, vector_search

    return _build
