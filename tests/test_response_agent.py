"""Tests for ResponseAgent composition policies."""

import json

import pytest

from rag_chat.agents.response_agent import ResponseAgent
from rag_chat.config.constants import CompositionState, Intent, ModelPolicy
from rag_chat.retrieval.vector_retriever import assign_citations
from rag_chat.schema.answer import ComposedAnswer
from rag_chat.schema.conversation import Conversation
from rag_chat.schema.excerpt import RetrievalResult
from rag_chat.utils.exceptions import AgentError, ProviderError
from tests.fakes import VALID_STRUCTURED, FakeCompletionBackend


@pytest.fixture
def retrieval(html_hits):
    return RetrievalResult(excerpts=assign_citations(html_hits))


@pytest.mark.asyncio
async def test_smalltalk_uses_random_policy_and_persona(pipeline_config):
    completion = FakeCompletionBackend()
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(Intent.SMALLTALK, Conversation.single("hi, how are you?"))

    assert composed.text == "Hi there! How can I help you today?"
    call = completion.calls_for("random")[0]
    assert call["model"] == pipeline_config.policy(ModelPolicy.RANDOM).model
    system_prompt = call["messages"][0].content
    assert "Atlas" in system_prompt
    assert "friendly and concise" in system_prompt


@pytest.mark.asyncio
async def test_hostile_reply_never_names_vendor_or_model(pipeline_config):
    completion = FakeCompletionBackend({
        "hostile": "I'm Atlas. Under the hood I run on GPT-4o by OpenAI, but let's stay calm.",
    })
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(Intent.HOSTILE, Conversation.single("you are stupid"))

    assert "GPT" not in composed.text
    assert "OpenAI" not in composed.text
    assert "Acme Labs" in composed.text
    assert completion.stages() == ["hostile"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply, leaked",
    [
        ("Relax, I'm Qwen2.5… and I'm still happy to help.", "qwen2.5"),
        ("I am based on GPT4… but that doesn't matter here.", "gpt4"),
        ("My weights are Llama3 ones.", "llama3"),
        ("I'm qwen-2.5-72b-instruct, served through OpenRouter.", "2.5-72b"),
    ],
)
async def test_hostile_reply_redacts_versioned_model_ids(pipeline_config, reply, leaked):
    agent = ResponseAgent(FakeCompletionBackend({"hostile": reply}), pipeline_config)

    composed = await agent.compose(Intent.HOSTILE, Conversation.single("what model are you, idiot?"))

    lowered = composed.text.lower()
    assert leaked not in lowered
    for family in ("qwen", "gpt", "llama", "openrouter"):
        assert family not in lowered
    assert "Acme Labs" in composed.text


@pytest.mark.asyncio
async def test_question_prompt_carries_cited_excerpts(pipeline_config, retrieval):
    completion = FakeCompletionBackend()
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(Intent.QUESTION, Conversation.single("what is html"), retrieval)

    assert composed.text.endswith("[1].")
    assert not composed.is_structured
    system_prompt = completion.calls_for("question")[0]["messages"][0].content
    assert "[1] (source: HTML basics (mdn-html))" in system_prompt
    assert "[2] (source: whatwg-html)" in system_prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("intent", [Intent.QUESTION, Intent.STRUCTURED_QUESTION])
async def test_retrieval_fault_uses_backup_prompt(pipeline_config, intent):
    completion = FakeCompletionBackend()
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(
        intent, Conversation.single("what is html"), RetrievalResult.failed("index unreachable")
    )

    assert composed.used_backup_prompt is True
    assert composed.text.startswith("While I couldn't perform a search due to an error")
    assert completion.stages() == ["backup"]


@pytest.mark.asyncio
async def test_structured_answer_is_validated_blocks(pipeline_config, retrieval):
    completion = FakeCompletionBackend()
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(
        Intent.STRUCTURED_QUESTION, Conversation.single("top 5 countries by population"), retrieval
    )

    assert composed.is_structured
    assert composed.text is None
    assert composed.degraded is False
    assert composed.structured.to_payload() == VALID_STRUCTURED
    assert composed.states == [
        CompositionState.DRAFTING,
        CompositionState.RAW_RECEIVED,
        CompositionState.VALIDATED,
        CompositionState.DONE,
    ]
    call = completion.calls_for("structured")[0]
    assert call["temperature"] == pipeline_config.policy(ModelPolicy.STRUCTURED).temperature


@pytest.mark.asyncio
async def test_unparseable_structured_output_degrades_to_text(pipeline_config, retrieval):
    completion = FakeCompletionBackend({"structured": "Sure! Here's a table: | a | b |"})
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(
        Intent.STRUCTURED_QUESTION, Conversation.single("top 5 countries by population"), retrieval
    )

    assert composed.structured is None
    assert composed.degraded is True
    assert composed.text == "HTML is the standard markup language for web pages [1]."
    assert composed.states == [
        CompositionState.DRAFTING,
        CompositionState.RAW_RECEIVED,
        CompositionState.DEGRADED_TEXT,
        CompositionState.DONE,
    ]
    assert completion.stages() == ["structured", "question"]


@pytest.mark.asyncio
async def test_inconsistent_structured_output_degrades_after_parsing(pipeline_config, retrieval):
    payload = json.loads(json.dumps(VALID_STRUCTURED))
    payload["blocks"][2]["data"].pop()
    completion = FakeCompletionBackend({"structured": json.dumps(payload)})
    agent = ResponseAgent(completion, pipeline_config)

    composed = await agent.compose(
        Intent.STRUCTURED_QUESTION, Conversation.single("top 5 countries by population"), retrieval
    )

    assert composed.degraded is True
    assert composed.states == [
        CompositionState.DRAFTING,
        CompositionState.RAW_RECEIVED,
        CompositionState.VALIDATED,
        CompositionState.DEGRADED_TEXT,
        CompositionState.DONE,
    ]


@pytest.mark.asyncio
async def test_completion_failure_raises_agent_error(pipeline_config, retrieval):
    completion = FakeCompletionBackend({"question": ProviderError("503")})
    agent = ResponseAgent(completion, pipeline_config)

    with pytest.raises(AgentError):
        await agent.compose(Intent.QUESTION, Conversation.single("what is html"), retrieval)


@pytest.mark.asyncio
async def test_compose_stream_yields_chunks_then_answer(pipeline_config, retrieval):
    agent = ResponseAgent(FakeCompletionBackend(), pipeline_config)

    stream = agent.compose_stream(Intent.QUESTION, Conversation.single("what is html"), retrieval)
    items = [item async for item in stream]

    chunks, composed = items[:-1], items[-1]
    assert len(chunks) > 1
    assert all(isinstance(chunk, str) for chunk in chunks)
    assert isinstance(composed, ComposedAnswer)
    assert "".join(chunks) == composed.text


@pytest.mark.asyncio
async def test_compose_stream_buffers_validated_structured_answer(pipeline_config, retrieval):
    agent = ResponseAgent(FakeCompletionBackend(), pipeline_config)

    items = [
        item async for item in agent.compose_stream(
            Intent.STRUCTURED_QUESTION, Conversation.single("top 5 countries by population"), retrieval
        )
    ]

    assert len(items) == 1
    assert items[0].is_structured
