"""
Base agent definitions.

This module defines:
- AgentInterface: minimal common interface for all agents.
- BaseAgent: shared completion-backend setup and helpers for sending prompts
  (buffered or streamed).

Concrete agents (IntentionAgent, HydeAgent, ResponseAgent) inherit from
BaseAgent and:
- Build the system prompt for their stage
- Call the BaseAgent's LLM helper with the model policy of that stage
- Translate the raw completion into their stage's result type
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Optional, Sequence

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from rag_chat.config.constants import AgentType
from rag_chat.config.pipeline import PipelineConfig, PolicySettings
from rag_chat.providers.completion import CompletionBackend
from rag_chat.utils.exceptions import AgentError
from rag_chat.utils.logger import logger


class AgentInterface(ABC):
    """
    Minimal interface for all agents in the system.

    Agents expose their type; each stage adds its own async entry point
    (classify, expand, compose).
    """

    @abstractmethod
    def get_agent_type(self) -> AgentType:
        """Return the AgentType enum value for this agent."""


class BaseAgent(AgentInterface, ABC):
    """
    Abstract base class for agents.

    Responsibilities:
    - Store the AgentType
    - Hold the shared completion backend and the pipeline configuration
    - Provide private helpers for sending prompts to the LLM
    """

    def __init__(
        self,
        agent_type: AgentType,
        completion: CompletionBackend,
        pipeline_config: PipelineConfig,
    ) -> None:
        if completion is None:
            raise AgentError(f"Agent '{agent_type.value}' requires a completion backend")
        self._agent_type = agent_type
        self._completion = completion
        self.pipeline_config = pipeline_config
        self.logger = logger

    # ------------------------------------------------------------------
    # AgentInterface implementation
    # ------------------------------------------------------------------
    def get_agent_type(self) -> AgentType:
        return self._agent_type

    # ------------------------------------------------------------------
    # LLM helpers
    # ------------------------------------------------------------------
    def _build_messages(
        self,
        system_prompt: Optional[str],
        prompt: Optional[str],
        history: Sequence[BaseMessage],
    ) -> List[BaseMessage]:
        messages: List[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.extend(history)
        if prompt:
            messages.append(HumanMessage(content=prompt))

        if not messages:
            raise AgentError(f"[{self._agent_type.value}] Nothing to send to the LLM")
        return messages

    async def _call_llm(
        self,
        policy: PolicySettings,
        system_prompt: Optional[str] = None,
        prompt: Optional[str] = None,
        history: Sequence[BaseMessage] = (),
    ) -> str:
        """
        Send a system prompt followed by history and/or a single prompt.

        Raises:
            AgentError: If the completion backend fails
        """
        messages = self._build_messages(system_prompt, prompt, history)
        try:
            return await self._completion.complete(
                model=policy.model,
                temperature=policy.temperature,
                messages=messages,
                provider=policy.provider,
            )
        except AgentError:
            raise
        except Exception as e:
            raise AgentError(
                f"LLM call failed for agent '{self._agent_type.value}' ({policy.model}): {e}"
            ) from e

    async def _stream_llm(
        self,
        policy: PolicySettings,
        system_prompt: Optional[str] = None,
        prompt: Optional[str] = None,
        history: Sequence[BaseMessage] = (),
    ) -> AsyncIterator[str]:
        """
        Same as _call_llm, but yields the completion as text chunks.

        Raises:
            AgentError: If the completion backend fails, before or mid-stream
        """
        messages = self._build_messages(system_prompt, prompt, history)
        try:
            async for chunk in self._completion.astream_complete(
                model=policy.model,
                temperature=policy.temperature,
                messages=messages,
                provider=policy.provider,
            ):
                yield chunk
        except AgentError:
            raise
        except Exception as e:
            raise AgentError(
                f"LLM stream failed for agent '{self._agent_type.value}' ({policy.model}): {e}"
            ) from e
