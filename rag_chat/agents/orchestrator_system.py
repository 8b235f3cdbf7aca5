"""
OrchestratorSystem implementation.

This component wires the pipeline together:

1. Initializes all stages in __init__:
   - IntentionAgent (intent classifier)
   - HydeAgent (query expander)
   - VectorRetriever (or any RetrieverInterface)
   - ResponseAgent (response composer)
2. Exposes handle_turn(), an async generator that:
   - Classifies the turn, expands and retrieves for question-like intents,
     composes the answer
   - Yields a ProgressUpdate before every stage, TextChunk events while a
     plain-text answer streams, and one FinalAnswer at the end
   - Converts every unabsorbed fault (including the turn timeout) into an
     error indicator plus the backup answer
3. Exposes submit_turn(), which drains handle_turn() and returns the answer.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Awaitable, List, Optional, TypeVar

from rag_chat.agents.hyde_agent import HydeAgent
from rag_chat.agents.intention_agent import IntentionAgent
from rag_chat.agents.response_agent import ResponseAgent
from rag_chat.config.constants import STATIC_APOLOGY, ErrorCode, IndicatorIcon, Intent
from rag_chat.config.pipeline import PipelineConfig
from rag_chat.providers.registry import ProviderRegistry
from rag_chat.retrieval.base_retriever import RetrieverInterface
from rag_chat.retrieval.vector_retriever import VectorRetriever
from rag_chat.schema.answer import ComposedAnswer, FinalAnswer, ProgressUpdate, TextChunk, TurnAnswer, TurnEvent
from rag_chat.schema.conversation import Conversation
from rag_chat.schema.excerpt import RetrievalResult
from rag_chat.schema.progress import ProgressTracker
from rag_chat.utils.exceptions import TurnTimeoutError
from rag_chat.utils.logger import logger

T = TypeVar("T")

_END = object()
_RESTART = object()

_STAGE_FAULTS = {
    "classify": ErrorCode.CLASSIFICATION_ERROR,
    "expand": ErrorCode.EXPANSION_ERROR,
    "retrieve": ErrorCode.RETRIEVAL_ERROR,
    "compose": ErrorCode.COMPOSITION_ERROR,
}


class OrchestratorSystem:
    """
    High-level orchestration of one conversational turn.

    The orchestrator holds no per-turn state: everything a turn produces
    (intent, excerpts, blocks, indicators) lives in handle_turn()'s frame,
    so one instance can serve concurrent turns of different sessions.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        pipeline_config: PipelineConfig,
        retriever: Optional[RetrieverInterface] = None,
    ) -> None:
        self.logger = logger
        self.pipeline_config = pipeline_config

        # Initialize all stages here (single source of truth)
        self.intention_agent = IntentionAgent(registry.completion, pipeline_config)
        self.hyde_agent = HydeAgent(registry.completion, pipeline_config)
        self.retriever = retriever or VectorRetriever(
            embedder=registry.embedder,
            vector_search=registry.vector_search,
            namespace=pipeline_config.namespace,
            top_k=pipeline_config.top_k,
        )
        self.response_agent = ResponseAgent(registry.completion, pipeline_config)

        self.logger.info("OrchestratorSystem initialized with Intention, HYDE, Retriever and Response stages.")

    async def submit_turn(self, conversation: Conversation) -> TurnAnswer:
        """Run a turn to completion and return its final answer."""
        answer: Optional[TurnAnswer] = None
        async for event in self.handle_turn(conversation):
            if isinstance(event, FinalAnswer):
                answer = event.answer
        return answer

    async def handle_turn(self, conversation: Conversation) -> AsyncIterator[TurnEvent]:
        """
        Execute the full pipeline for the last user message:
        classify -> (expand -> retrieve) -> compose -> answer.

        Yields:
            ProgressUpdate snapshots (append order), TextChunk events for a
            plain-text answer, then exactly one FinalAnswer.

        Raises:
            ValueError: If conversation is not a Conversation. Pipeline
                        faults never raise; they degrade the answer.
        """
        if not isinstance(conversation, Conversation):
            raise ValueError("handle_turn expects a Conversation")

        self.logger.info("[OrchestratorSystem] Received turn for processing.")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.pipeline_config.turn_timeout
        tracker = ProgressTracker()
        faults: List[ErrorCode] = []
        intent = Intent.default()
        answer: Optional[TurnAnswer] = None
        stage = "classify"
        streamed = False

        try:
            # Step 1: Classify
            yield ProgressUpdate(tracker.append("Understanding your message", IndicatorIcon.UNDERSTANDING))
            intent = await self._within(self.intention_agent.classify(conversation), deadline, stage)

            # Step 2: Expand + retrieve (question-like intents only)
            retrieval: Optional[RetrievalResult] = None
            if intent.needs_retrieval:
                stage = "expand"
                yield ProgressUpdate(tracker.append("Working out what to look for", IndicatorIcon.THINKING))
                passage = await self._within(self.hyde_agent.expand(conversation), deadline, stage)
                if passage is None:
                    faults.append(ErrorCode.EXPANSION_ERROR)
                query = passage or conversation.last_user_message

                stage = "retrieve"
                yield ProgressUpdate(tracker.append("Searching for relevant sources", IndicatorIcon.SEARCHING))
                retrieval = await self._within(self.retriever.retrieve(query), deadline, stage)
                if retrieval.fault:
                    faults.append(ErrorCode.RETRIEVAL_ERROR)
                    yield ProgressUpdate(tracker.append(
                        "Search failed, answering from my own knowledge", IndicatorIcon.ERROR
                    ))

            # Step 3: Compose
            stage = "compose"
            if retrieval is not None and retrieval.excerpts:
                yield ProgressUpdate(tracker.append(
                    f"Reading {len(retrieval.excerpts)} sources", IndicatorIcon.DOCUMENTS
                ))
            else:
                yield ProgressUpdate(tracker.append("Writing a response", IndicatorIcon.THINKING))
            composed: Optional[ComposedAnswer] = None
            async for item in self._stream_within(
                self.response_agent.compose_stream(intent, conversation, retrieval), deadline, stage
            ):
                if isinstance(item, ComposedAnswer):
                    composed = item
                else:
                    streamed = True
                    yield TextChunk(item)
            if composed.degraded:
                faults.append(ErrorCode.STRUCTURED_OUTPUT_ERROR)

            answer = TurnAnswer(
                intent=intent,
                text=composed.text,
                structured=composed.structured,
                excerpts=list(retrieval.excerpts) if retrieval is not None and not composed.used_backup_prompt else [],
                faults=faults,
                degraded=composed.degraded or composed.used_backup_prompt,
            )

        except TurnTimeoutError as e:
            self.logger.warning(f"[OrchestratorSystem] {e}; switching to the backup answer.")
            faults.append(ErrorCode.TIMEOUT_ERROR)
        except Exception as e:
            self.logger.error(
                f"[OrchestratorSystem] Stage '{stage}' failed: {e}; switching to the backup answer.",
                exc_info=True,
            )
            faults.append(_STAGE_FAULTS[stage])

        if answer is None:
            yield ProgressUpdate(tracker.append(
                "Something went wrong, answering from my own knowledge", IndicatorIcon.ERROR
            ))
            parts: List[str] = []
            async for chunk in self._backup_chunks(conversation, faults):
                if chunk is _RESTART:
                    parts = []
                    continue
                yield TextChunk(chunk, restart=streamed and not parts)
                streamed = True
                parts.append(chunk)
            answer = TurnAnswer(
                intent=intent,
                text="".join(parts),
                faults=faults,
                degraded=True,
            )

        self.logger.info(
            f"[OrchestratorSystem] Turn handled: intent={intent.value}, "
            f"structured={answer.is_structured}, faults={[f.value for f in faults]}"
        )
        yield ProgressUpdate(tracker.finish())
        yield FinalAnswer(answer)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _within(self, awaitable: Awaitable[T], deadline: float, stage: str) -> T:
        """Await a stage with whatever is left of the turn budget."""
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise TurnTimeoutError(f"Turn budget exhausted before stage '{stage}'")
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError:
            raise TurnTimeoutError(f"Stage '{stage}' ran past its deadline") from None

    async def _stream_within(self, stream: AsyncIterator[T], deadline: float, stage: str) -> AsyncIterator[T]:
        """Iterate a stream, giving every item whatever is left of the budget."""
        try:
            while True:
                item = await self._within(_next_or_end(stream), deadline, stage)
                if item is _END:
                    return
                yield item
        finally:
            await stream.aclose()

    async def _backup_chunks(self, conversation: Conversation, faults: List[ErrorCode]) -> AsyncIterator[Any]:
        """
        Stream the backup answer within backup_timeout.

        Ends with the static apology when the backup fails; _RESTART is
        yielded first if part of the backup answer was already shown.
        """
        deadline = asyncio.get_running_loop().time() + self.pipeline_config.backup_timeout
        shown = False
        try:
            async for chunk in self._stream_within(
                self.response_agent.respond_with_backup(conversation), deadline, "backup"
            ):
                shown = True
                yield chunk
        except Exception as e:
            self.logger.error(f"[OrchestratorSystem] Backup answer failed: {e}; using the static reply.")
        else:
            if shown:
                return
            self.logger.error("[OrchestratorSystem] Backup answer was empty; using the static reply.")

        faults.append(ErrorCode.BACKUP_ERROR)
        if shown:
            yield _RESTART
        yield STATIC_APOLOGY


async def _next_or_end(stream: AsyncIterator[T]) -> Any:
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return _END
