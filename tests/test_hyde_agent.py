"""Tests for HydeAgent."""

import pytest
from langchain_core.messages import HumanMessage

from rag_chat.agents.hyde_agent import HydeAgent
from rag_chat.config.constants import ModelPolicy
from rag_chat.schema.conversation import Conversation, Message
from rag_chat.utils.exceptions import ProviderError
from tests.fakes import FakeCompletionBackend


@pytest.mark.asyncio
async def test_expand_returns_hypothetical_passage(pipeline_config):
    completion = FakeCompletionBackend({"hyde": "  HTML structures documents on the web.  "})

    passage = await HydeAgent(completion, pipeline_config).expand(Conversation.single("what is html"))

    assert passage == "HTML structures documents on the web."
    call = completion.calls_for("hyde")[0]
    policy = pipeline_config.policy(ModelPolicy.HYDE)
    assert (call["model"], call["temperature"]) == (policy.model, policy.temperature)


@pytest.mark.asyncio
async def test_expand_uses_only_the_last_messages(pipeline_config):
    conversation = Conversation.from_messages([
        Message("user", "first question about python"),
        Message("assistant", "python answer"),
        Message("user", "second question about rust"),
        Message("assistant", "rust answer"),
        Message("user", "what is html"),
    ])
    completion = FakeCompletionBackend()

    await HydeAgent(completion, pipeline_config).expand(conversation)

    sent = completion.calls_for("hyde")[0]["messages"]
    assert len(sent) == 1
    assert isinstance(sent[0], HumanMessage)
    prompt = sent[0].content
    assert "user: what is html" in prompt
    assert "assistant: rust answer" in prompt
    assert "user: second question about rust" in prompt
    assert "python" not in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [ProviderError("timeout"), "", "   \n"])
async def test_expand_returns_none_when_no_passage_is_produced(pipeline_config, response):
    completion = FakeCompletionBackend({"hyde": response})

    assert await HydeAgent(completion, pipeline_config).expand(Conversation.single("what is html")) is None
