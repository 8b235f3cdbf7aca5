"""
Pipeline configuration passed to the OrchestratorSystem at construction.

The Config singleton holds raw environment values. PipelineConfig is the
explicit, immutable view the pipeline runs with: one PolicySettings per
model policy, the assistant identity and the retrieval/timeout settings.
Tests build their own PipelineConfig instead of touching global state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from rag_chat.config.constants import DEFAULT_NAMESPACE, ModelPolicy
from rag_chat.config.settings import Config, config as default_config
from rag_chat.utils.exceptions import ConfigurationError


FAST_MODEL = "qwen/qwen-2.5-7b-instruct"
CAPABLE_MODEL = "qwen/qwen-2.5-72b-instruct"


@dataclass(frozen=True)
class PolicySettings:
    """Model, temperature and provider used for one policy."""
    model: str
    temperature: float
    provider: str = "openai"


DEFAULT_POLICIES: Dict[ModelPolicy, PolicySettings] = {
    ModelPolicy.INTENT: PolicySettings(FAST_MODEL, 0.2),
    ModelPolicy.RANDOM: PolicySettings(CAPABLE_MODEL, 0.7),
    ModelPolicy.HOSTILE: PolicySettings(CAPABLE_MODEL, 0.4),
    ModelPolicy.QUESTION: PolicySettings(CAPABLE_MODEL, 0.7),
    ModelPolicy.HYDE: PolicySettings(FAST_MODEL, 0.3),
    ModelPolicy.STRUCTURED: PolicySettings(CAPABLE_MODEL, 0.2),
}


@dataclass(frozen=True)
class AssistantIdentity:
    """Persona the assistant presents to the user."""
    ai_name: str
    owner_name: str
    owner_description: str
    ai_role: str
    ai_tone: str

    @classmethod
    def from_config(cls, cfg: Config) -> "AssistantIdentity":
        return cls(
            ai_name=cfg.AI_NAME,
            owner_name=cfg.OWNER_NAME,
            owner_description=cfg.OWNER_DESCRIPTION,
            ai_role=cfg.AI_ROLE,
            ai_tone=cfg.AI_TONE,
        )


@dataclass(frozen=True)
class PipelineConfig:
    """
    Everything the pipeline needs to run a turn.

    Attributes:
        policies: PolicySettings per ModelPolicy
        identity: Assistant persona used in the system prompts
        top_k: Number of hits requested from the vector index
        namespace: Vector index namespace searched by the retriever
        turn_timeout: Wall-clock budget for a whole turn, in seconds
        backup_timeout: Budget for the backup answer after a fault, in seconds
        intent_history: Number of trailing messages shown to the classifier
        hyde_history: Number of trailing messages shown to the query expander
    """
    policies: Mapping[ModelPolicy, PolicySettings] = field(
        default_factory=lambda: dict(DEFAULT_POLICIES)
    )
    identity: AssistantIdentity = field(
        default_factory=lambda: AssistantIdentity.from_config(default_config)
    )
    top_k: int = 5
    namespace: str = DEFAULT_NAMESPACE
    turn_timeout: float = 45.0
    backup_timeout: float = 15.0
    intent_history: int = 6
    hyde_history: int = 3

    def __post_init__(self):
        missing = [p.value for p in ModelPolicy if p not in self.policies]
        if missing:
            raise ConfigurationError(f"Missing model policies: {', '.join(missing)}")
        if self.top_k <= 0:
            raise ConfigurationError("top_k must be a positive integer")
        if self.turn_timeout <= 0 or self.backup_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")

    def policy(self, key: ModelPolicy) -> PolicySettings:
        return self.policies[key]

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------
    @classmethod
    def from_env(cls, cfg: Optional[Config] = None) -> "PipelineConfig":
        """
        Build the pipeline configuration from the Config singleton.

        Per-policy overrides are read from <POLICY>_MODEL, <POLICY>_TEMPERATURE
        and <POLICY>_PROVIDER, e.g. HYDE_MODEL or QUESTION_TEMPERATURE.
        """
        cfg = cfg or default_config
        policies: Dict[ModelPolicy, PolicySettings] = {}
        for key, default in DEFAULT_POLICIES.items():
            prefix = key.value.upper()
            policies[key] = _policy_from_values(
                default,
                model=os.getenv(f"{prefix}_MODEL"),
                temperature=os.getenv(f"{prefix}_TEMPERATURE"),
                provider=os.getenv(f"{prefix}_PROVIDER"),
                source=prefix,
            )

        return cls(
            policies=policies,
            identity=AssistantIdentity.from_config(cfg),
            top_k=cfg.TOP_K_RESULTS,
            namespace=cfg.VECTOR_NAMESPACE,
            turn_timeout=cfg.TURN_TIMEOUT_SECONDS,
            backup_timeout=cfg.BACKUP_TIMEOUT_SECONDS,
            intent_history=cfg.INTENT_HISTORY_MESSAGES,
            hyde_history=cfg.HYDE_HISTORY_MESSAGES,
        )

    def with_overrides(self, overrides: Mapping[str, Any]) -> "PipelineConfig":
        """
        Return a copy with overrides applied.

        Recognized keys are the policy names ("intent", "random", "hostile",
        "question", "hyde", "structured"), each mapping to a dict with any of
        "model", "temperature", "provider", plus the scalar fields of this
        class ("top_k", "namespace", "turn_timeout", ...).
        """
        policies = dict(self.policies)
        scalars: Dict[str, Any] = {}
        scalar_fields = {"top_k", "namespace", "turn_timeout", "backup_timeout",
                         "intent_history", "hyde_history"}

        for name, value in overrides.items():
            try:
                key = ModelPolicy(name)
            except ValueError:
                if name not in scalar_fields:
                    raise ConfigurationError(f"Unknown configuration key: {name!r}")
                scalars[name] = value
                continue

            if not isinstance(value, Mapping):
                raise ConfigurationError(f"Policy {name!r} must be a mapping")
            policies[key] = _policy_from_values(
                policies[key],
                model=value.get("model"),
                temperature=value.get("temperature"),
                provider=value.get("provider"),
                source=name,
            )

        return replace(self, policies=policies, **scalars)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any], cfg: Optional[Config] = None) -> "PipelineConfig":
        return cls.from_env(cfg).with_overrides(overrides)


def _policy_from_values(
    base: PolicySettings,
    model: Optional[str],
    temperature: Any,
    provider: Optional[str],
    source: str,
) -> PolicySettings:
    if temperature is not None and temperature != "":
        try:
            temperature = float(temperature)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid temperature for {source}: {temperature!r}") from e
    else:
        temperature = base.temperature

    return PolicySettings(
        model=model or base.model,
        temperature=temperature,
        provider=provider or base.provider,
    )
