"""
HydeAgent implementation (Hypothetical Document Embedding).

The embedding of a hypothetical *answer* lands closer to relevant passages
than the embedding of a short question. This agent asks the fast model for
such a passage, based on the last few messages only.
"""

from __future__ import annotations

from typing import Optional

from rag_chat.agents.base_agent import BaseAgent
from rag_chat.config.constants import AgentType, ModelPolicy
from rag_chat.config.pipeline import PipelineConfig
from rag_chat.config.prompts import hyde_prompt
from rag_chat.providers.completion import CompletionBackend
from rag_chat.schema.conversation import Conversation
from rag_chat.utils.helpers import truncate


class HydeAgent(BaseAgent):

    def __init__(self, completion: CompletionBackend, pipeline_config: PipelineConfig) -> None:
        super().__init__(
            agent_type=AgentType.HYDE,
            completion=completion,
            pipeline_config=pipeline_config,
        )

    async def expand(self, conversation: Conversation) -> Optional[str]:
        """
        Return a hypothetical passage for the last user message, or None.

        None means expansion failed; the caller should search with the raw
        last user message instead.
        """
        try:
            passage = await self._call_llm(
                policy=self.pipeline_config.policy(ModelPolicy.HYDE),
                prompt=hyde_prompt(conversation, self.pipeline_config.hyde_history),
            )
        except Exception as e:
            self.logger.warning(f"[HydeAgent] Expansion failed: {e}; using the raw message.")
            return None

        passage = (passage or "").strip()
        if not passage:
            self.logger.warning("[HydeAgent] Expansion returned no text; using the raw message.")
            return None

        self.logger.debug(f"[HydeAgent] Hypothetical passage: {truncate(passage)}")
        return passage
