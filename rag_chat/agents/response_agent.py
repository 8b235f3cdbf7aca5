"""
ResponseAgent implementation (response composer).

This agent:
- Inherits from BaseAgent
- Picks one of four composition policies from the turn's Intent
- Builds the system prompt for that policy (persona, calming, cited RAG,
  strict-JSON structured answer)
- Runs the structured answer through the parse-then-validate pipeline and
  degrades to a plain-text answer when the JSON cannot be trusted
- Streams plain-text answers chunk by chunk (compose_stream)

Policies:
- hostile: calming persona, never discloses the underlying model or vendor
- smalltalk: persona with configured tone
- question: excerpts as a cited context block; backup prompt on retrieval fault
- structured_question: text + table + chart blocks, or plain text on failure
"""

from __future__ import annotations

from typing import AsyncIterator, List, Optional, Union

from rag_chat.agents.base_agent import BaseAgent
from rag_chat.agents.structured_output import extract_candidate, parse_candidate, validate_payload
from rag_chat.config.constants import (
    VENDOR_TERMS,
    AgentType,
    CompositionState,
    Intent,
    ModelPolicy,
)
from rag_chat.config.pipeline import PipelineConfig
from rag_chat.config.prompts import (
    hostile_message_prompt,
    question_backup_prompt,
    question_prompt,
    random_message_prompt,
    structured_prompt,
)
from rag_chat.providers.completion import CompletionBackend
from rag_chat.retrieval.base_retriever import format_context
from rag_chat.schema.answer import ComposedAnswer
from rag_chat.schema.conversation import Conversation
from rag_chat.schema.excerpt import RetrievalResult
from rag_chat.utils.exceptions import StructuredOutputError
from rag_chat.utils.helpers import redact_terms


class ResponseAgent(BaseAgent):
    """
    Agent that writes the final answer of a turn.
    """

    def __init__(self, completion: CompletionBackend, pipeline_config: PipelineConfig) -> None:
        super().__init__(
            agent_type=AgentType.RESPONSE,
            completion=completion,
            pipeline_config=pipeline_config,
        )
        self.identity = pipeline_config.identity

    async def compose(
        self,
        intent: Intent,
        conversation: Conversation,
        retrieval: Optional[RetrievalResult] = None,
    ) -> ComposedAnswer:
        """
        Compose the answer for an already classified turn.

        Args:
            intent: Intent of the turn
            conversation: Full conversation; its last message is answered
            retrieval: Retrieved context (question-like intents only)

        Raises:
            AgentError: If a completion call fails. Structured output
                        problems never raise; they degrade to plain text.
        """
        composed: Optional[ComposedAnswer] = None
        async for item in self.compose_stream(intent, conversation, retrieval):
            if isinstance(item, ComposedAnswer):
                composed = item
        return composed

    async def compose_stream(
        self,
        intent: Intent,
        conversation: Conversation,
        retrieval: Optional[RetrievalResult] = None,
    ) -> AsyncIterator[Union[str, ComposedAnswer]]:
        """
        Streaming form of compose().

        Yields the text chunks of a plain-text answer as they arrive, then
        exactly one ComposedAnswer whose text is the joined chunks. A
        structured answer yields no chunks. Hostile replies are redacted
        before they are shown, so they arrive as a single chunk.
        """
        self.logger.info(f"[ResponseAgent] Composing answer for intent={intent.value}")

        if intent == Intent.HOSTILE:
            text = await self._respond_to_hostile(conversation)
            if text:
                yield text
            yield ComposedAnswer(text=text)
            return

        retrieval_fault = retrieval is not None and retrieval.fault
        if intent == Intent.STRUCTURED_QUESTION and not retrieval_fault:
            async for item in self._respond_structured(conversation, retrieval):
                yield item
            return

        used_backup_prompt = False
        if intent == Intent.SMALLTALK:
            chunks = self._respond_to_random(conversation)
        elif retrieval_fault:
            self.logger.warning(
                f"[ResponseAgent] Retrieval fault ({retrieval.error}); using the backup prompt."
            )
            chunks = self.respond_with_backup(conversation)
            used_backup_prompt = True
        else:
            chunks = self._respond_to_question(conversation, retrieval)

        parts: List[str] = []
        async for chunk in chunks:
            parts.append(chunk)
            yield chunk
        yield ComposedAnswer(text="".join(parts), used_backup_prompt=used_backup_prompt)

    # ------------------------------------------------------------------
    # Plain-text policies
    # ------------------------------------------------------------------
    def _respond_to_random(self, conversation: Conversation) -> AsyncIterator[str]:
        return self._stream_llm(
            policy=self.pipeline_config.policy(ModelPolicy.RANDOM),
            system_prompt=random_message_prompt(self.identity),
            history=conversation.to_langchain(),
        )

    async def _respond_to_hostile(self, conversation: Conversation) -> str:
        reply = await self._call_llm(
            policy=self.pipeline_config.policy(ModelPolicy.HOSTILE),
            system_prompt=hostile_message_prompt(self.identity),
            history=conversation.to_langchain(),
        )
        redacted = redact_terms(reply, VENDOR_TERMS, self.identity.owner_name)
        if redacted != reply:
            self.logger.warning("[ResponseAgent] Removed vendor/model names from hostile reply")
        return redacted

    def _respond_to_question(
        self,
        conversation: Conversation,
        retrieval: Optional[RetrievalResult],
    ) -> AsyncIterator[str]:
        excerpts = retrieval.excerpts if retrieval is not None else []
        return self._stream_llm(
            policy=self.pipeline_config.policy(ModelPolicy.QUESTION),
            system_prompt=question_prompt(self.identity, format_context(excerpts)),
            history=conversation.to_langchain(),
        )

    def respond_with_backup(self, conversation: Conversation) -> AsyncIterator[str]:
        """Uncited answer used when no search could be performed, as text chunks."""
        return self._stream_llm(
            policy=self.pipeline_config.policy(ModelPolicy.QUESTION),
            system_prompt=question_backup_prompt(self.identity),
            history=conversation.to_langchain(),
        )

    # ------------------------------------------------------------------
    # Structured policy
    # ------------------------------------------------------------------
    async def _respond_structured(
        self,
        conversation: Conversation,
        retrieval: Optional[RetrievalResult],
    ) -> AsyncIterator[Union[str, ComposedAnswer]]:
        states: List[CompositionState] = [CompositionState.DRAFTING]
        excerpts = retrieval.excerpts if retrieval is not None else []

        raw = await self._call_llm(
            policy=self.pipeline_config.policy(ModelPolicy.STRUCTURED),
            system_prompt=structured_prompt(format_context(excerpts)),
            history=conversation.to_langchain(),
        )
        states.append(CompositionState.RAW_RECEIVED)

        try:
            payload = parse_candidate(extract_candidate(raw), raw=raw)
            states.append(CompositionState.VALIDATED)
            structured = validate_payload(payload, raw=raw)
        except StructuredOutputError as e:
            self.logger.warning(
                f"[ResponseAgent] Structured output rejected at {e.stage} stage: {e}; "
                "degrading to a plain-text answer."
            )
            states.append(CompositionState.DEGRADED_TEXT)
            parts: List[str] = []
            async for chunk in self._respond_to_question(conversation, retrieval):
                parts.append(chunk)
                yield chunk
            states.append(CompositionState.DONE)
            yield ComposedAnswer(text="".join(parts), states=states, degraded=True)
            return

        states.append(CompositionState.DONE)
        self.logger.info(
            f"[ResponseAgent] Structured answer validated "
            f"({len(structured.table.rows)} rows, {structured.chart.chart_type} chart)"
        )
        yield ComposedAnswer(structured=structured, states=states)
