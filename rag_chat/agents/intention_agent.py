"""
IntentionAgent implementation.

Responsibilities:
- Inspect the latest turns of a conversation and decide which intent the
  user message carries (hostile, smalltalk, question, structured_question).
- Use a "model as a function" for the decision: the fast model answers with
  a single closed-vocabulary token.
- Normalize the raw token against the closed set and fall back to
  Intent.default() (smalltalk) on anything else.

Note:
The IntentionAgent never retries. A failed or unreadable classification
degrades to the default intent instead of blocking the turn, and it never
degrades to structured_question since that path is the most fragile one.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from rag_chat.agents.base_agent import BaseAgent
from rag_chat.config.constants import INTENT_ALIASES, AgentType, Intent, ModelPolicy
from rag_chat.config.pipeline import PipelineConfig
from rag_chat.config.prompts import intention_prompt
from rag_chat.providers.completion import CompletionBackend
from rag_chat.schema.conversation import Conversation
from rag_chat.utils.helpers import strip_code_fences, truncate

# Multi-word spellings the model sometimes uses instead of the snake_case token
_SPACED_TOKENS = {
    "structured question": "structured_question",
    "small talk": "small_talk",
    "hostile message": "hostile_message",
}


def parse_intent(raw_output: Optional[str]) -> Optional[Intent]:
    """
    Map a raw classifier completion onto exactly one Intent.

    Accepts a bare token ("question"), a quoted or fenced token, a JSON
    object with a "type"/"intent" field, and the legacy tokens
    "hostile_message" / "random". Returns None when the output is empty,
    names no intent, or names more than one.
    """
    if not raw_output or not raw_output.strip():
        return None

    text = strip_code_fences(raw_output)

    if text.startswith("{"):
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError:
            payload = None
        if isinstance(payload, dict):
            value = payload.get("type") or payload.get("intent") or payload.get("intention")
            return parse_intent(value) if isinstance(value, str) else None

    lowered = text.lower()
    for spaced, token in _SPACED_TOKENS.items():
        lowered = lowered.replace(spaced, token)

    tokens = re.findall(r"[a-z_]+", lowered)
    matched = {INTENT_ALIASES[t] for t in tokens if t in INTENT_ALIASES}
    if len(matched) == 1:
        return matched.pop()
    return None


class IntentionAgent(BaseAgent):
    """
    Intent classifier.

    This agent does NOT answer user questions. It returns the Intent that
    decides which composition policy handles the turn.
    """

    def __init__(self, completion: CompletionBackend, pipeline_config: PipelineConfig) -> None:
        super().__init__(
            agent_type=AgentType.INTENTION,
            completion=completion,
            pipeline_config=pipeline_config,
        )

    async def classify(self, conversation: Conversation) -> Intent:
        decision = await self.route(conversation)
        return decision["intent"]

    # ------------------------------------------------------------------
    # Routing logic
    # ------------------------------------------------------------------
    async def route(self, conversation: Conversation) -> Dict[str, Any]:
        """
        Compute a classification decision for the conversation.

        Returns:
            Dict with keys:
            - intent: Intent
            - source: "llm" or "default"
            - raw_output: raw LLM output (or the error message)
        """
        self.logger.info(
            f"[IntentionAgent] Classifying: {truncate(conversation.last_user_message)}"
        )

        history = [m.to_langchain() for m in conversation.tail(self.pipeline_config.intent_history)]

        try:
            raw_output = await self._call_llm(
                policy=self.pipeline_config.policy(ModelPolicy.INTENT),
                system_prompt=intention_prompt(),
                history=history,
            )
        except Exception as e:
            self.logger.warning(
                f"[IntentionAgent] Classification call failed: {e}; "
                f"defaulting to '{Intent.default().value}'."
            )
            return self._build_decision(Intent.default(), source="default", raw_output=str(e))

        intent = parse_intent(raw_output)
        if intent is None:
            self.logger.warning(
                f"[IntentionAgent] Unrecognized classifier output: {raw_output!r}; "
                f"defaulting to '{Intent.default().value}'."
            )
            return self._build_decision(Intent.default(), source="default", raw_output=raw_output)

        self.logger.info(f"[IntentionAgent] Intent: {intent.value}")
        return self._build_decision(intent, source="llm", raw_output=raw_output)

    def _build_decision(self, intent: Intent, source: str, raw_output: str) -> Dict[str, Any]:
        return {
            "intent": intent,
            "source": source,
            "raw_output": raw_output,
        }
