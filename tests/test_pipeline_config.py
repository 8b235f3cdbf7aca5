"""Tests for PipelineConfig, the provider registry wiring and Conversation validation."""

import pytest

from rag_chat.config.constants import DEFAULT_NAMESPACE, ModelPolicy
from rag_chat.config.pipeline import DEFAULT_POLICIES, PipelineConfig, PolicySettings
from rag_chat.config.settings import Config
from rag_chat.providers.completion import ANTHROPIC, OPENAI_COMPATIBLE
from rag_chat.providers.registry import build_endpoints
from rag_chat.schema.conversation import Conversation, Message
from rag_chat.utils.exceptions import ConfigurationError


def test_defaults_cover_every_policy(pipeline_config):
    for key in ModelPolicy:
        assert isinstance(pipeline_config.policy(key), PolicySettings)
    assert pipeline_config.policy(ModelPolicy.INTENT).temperature == 0.2
    assert pipeline_config.policy(ModelPolicy.HYDE).temperature == 0.3
    assert pipeline_config.policy(ModelPolicy.QUESTION).temperature == 0.7


def test_with_overrides_changes_only_named_fields(pipeline_config):
    updated = pipeline_config.with_overrides({
        "hyde": {"model": "small-model", "temperature": "0.1"},
        "question": {"provider": "fireworks"},
        "top_k": 8,
    })

    assert updated.policy(ModelPolicy.HYDE) == PolicySettings("small-model", 0.1, "openai")
    question = updated.policy(ModelPolicy.QUESTION)
    assert question.provider == "fireworks"
    assert question.model == DEFAULT_POLICIES[ModelPolicy.QUESTION].model
    assert updated.top_k == 8
    assert pipeline_config.top_k == 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"unknown_policy": {"model": "x"}},
        {"hyde": "not-a-mapping"},
        {"intent": {"temperature": "warm"}},
        {"top_k": 0},
        {"turn_timeout": -1},
    ],
)
def test_invalid_overrides_raise_configuration_error(pipeline_config, overrides):
    with pytest.raises(ConfigurationError):
        pipeline_config.with_overrides(overrides)


def test_from_env_reads_policy_variables(monkeypatch):
    monkeypatch.setenv("INTENT_MODEL", "env-intent-model")
    monkeypatch.setenv("QUESTION_TEMPERATURE", "0.5")

    pipeline = PipelineConfig.from_env()

    assert pipeline.policy(ModelPolicy.INTENT).model == "env-intent-model"
    assert pipeline.policy(ModelPolicy.QUESTION).temperature == 0.5
    assert pipeline.policy(ModelPolicy.HYDE) == DEFAULT_POLICIES[ModelPolicy.HYDE]


def test_missing_policy_is_rejected():
    policies = dict(DEFAULT_POLICIES)
    del policies[ModelPolicy.STRUCTURED]

    with pytest.raises(ConfigurationError):
        PipelineConfig(policies=policies)


def test_build_endpoints_requires_openrouter_key(monkeypatch):
    cfg = Config()
    monkeypatch.setattr(cfg, "OPENROUTER_API_KEY", "")

    with pytest.raises(ConfigurationError):
        build_endpoints(cfg)


def test_build_endpoints_registers_fireworks_only_with_key(monkeypatch):
    cfg = Config()
    monkeypatch.setattr(cfg, "OPENROUTER_API_KEY", "or-key")
    monkeypatch.setattr(cfg, "FIREWORKS_API_KEY", "")
    monkeypatch.setattr(cfg, "ANTHROPIC_API_KEY", "")

    assert set(build_endpoints(cfg)) == {"openai"}

    monkeypatch.setattr(cfg, "FIREWORKS_API_KEY", "fw-key")
    endpoints = build_endpoints(cfg)

    assert set(endpoints) == {"openai", "fireworks"}
    assert "X-Title" in endpoints["openai"].default_headers


def test_build_endpoints_registers_anthropic_only_with_key(monkeypatch):
    cfg = Config()
    monkeypatch.setattr(cfg, "OPENROUTER_API_KEY", "or-key")
    monkeypatch.setattr(cfg, "FIREWORKS_API_KEY", "")
    monkeypatch.setattr(cfg, "ANTHROPIC_API_KEY", "")

    assert "anthropic" not in build_endpoints(cfg)

    monkeypatch.setattr(cfg, "ANTHROPIC_API_KEY", "an-key")
    endpoints = build_endpoints(cfg)

    assert set(endpoints) == {"openai", "anthropic"}
    assert endpoints["anthropic"].kind == ANTHROPIC
    assert endpoints["openai"].kind == OPENAI_COMPATIBLE


@pytest.mark.parametrize(
    "messages",
    [
        [],
        [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}],
        [{"role": "user", "content": "   "}],
        [{"role": "system", "content": "be nice"}, {"role": "user", "content": "hi"}],
    ],
)
def test_conversation_rejects_invalid_history(messages):
    with pytest.raises(ValueError):
        Conversation.from_messages(messages)


def test_conversation_from_chat_payload():
    conversation = Conversation.from_payload({
        "chat": {"messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "what is html"},
        ]}
    })

    assert conversation.last_user_message == "what is html"
    assert conversation.tail(2) == (Message("assistant", "hello"), Message("user", "what is html"))
    assert conversation.format_transcript(1) == "user: what is html"


def test_from_env_reads_pipeline_settings(monkeypatch):
    cfg = Config()
    monkeypatch.setattr(cfg, "VECTOR_NAMESPACE", "docs")
    monkeypatch.setattr(cfg, "INTENT_HISTORY_MESSAGES", 4)
    monkeypatch.setattr(cfg, "HYDE_HISTORY_MESSAGES", 7)

    pipeline = PipelineConfig.from_env(cfg)

    assert pipeline.namespace == "docs"
    assert pipeline.intent_history == 4
    assert pipeline.hyde_history == 7


def test_default_namespace_matches_constant():
    assert PipelineConfig().namespace == DEFAULT_NAMESPACE
