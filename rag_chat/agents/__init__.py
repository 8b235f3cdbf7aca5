"""
Agent architecture module.

This package defines the stages of a conversational turn:

- AgentInterface: Minimal contract for all agents.
- BaseAgent: Shared completion-backend setup and helper for sending prompts.
- IntentionAgent: Classifies the turn (hostile, smalltalk, question, structured_question).
- HydeAgent: Writes a hypothetical passage used as the retrieval query.
- ResponseAgent: Composes the plain-text or structured answer.
- OrchestratorSystem: High-level coordinator (classify -> retrieve -> compose -> answer).
"""

from rag_chat.agents.base_agent import AgentInterface, BaseAgent
from rag_chat.agents.intention_agent import IntentionAgent, parse_intent
from rag_chat.agents.hyde_agent import HydeAgent
from rag_chat.agents.response_agent import ResponseAgent
from rag_chat.agents.structured_output import parse_structured_answer
from rag_chat.agents.orchestrator_system import OrchestratorSystem

__all__ = [
    "AgentInterface",
    "BaseAgent",
    "IntentionAgent",
    "parse_intent",
    "HydeAgent",
    "ResponseAgent",
    "parse_structured_answer",
    "OrchestratorSystem",
]
