"""
Conversation data structures.

A Conversation is owned by the calling session and handed to the pipeline
by value for each turn. Both classes are frozen so the pipeline can never
append to or edit the caller's history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

USER = "user"
ASSISTANT = "assistant"
_ROLES = (USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in _ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if not isinstance(self.content, str):
            raise ValueError("Message content must be a string")

    def to_langchain(self) -> BaseMessage:
        if self.role == USER:
            return HumanMessage(content=self.content)
        return AIMessage(content=self.content)


@dataclass(frozen=True)
class Conversation:
    """
    Ordered, non-empty message history ending with the user turn to answer.
    """
    messages: Tuple[Message, ...]

    def __post_init__(self):
        if not self.messages:
            raise ValueError("Conversation must contain at least one message")
        if self.messages[-1].role != USER:
            raise ValueError("The last message of a conversation must come from the user")
        if not self.messages[-1].content.strip():
            raise ValueError("The last user message must not be empty")

    @classmethod
    def from_messages(cls, messages: Iterable[Union[Message, Mapping[str, Any]]]) -> "Conversation":
        items: List[Message] = []
        for m in messages:
            if isinstance(m, Message):
                items.append(m)
            else:
                items.append(Message(role=m.get("role", ""), content=m.get("content", "")))
        return cls(tuple(items))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Conversation":
        """Build from a chat request body: {"messages": [{role, content}, ...]}."""
        messages = payload.get("messages")
        if messages is None and isinstance(payload.get("chat"), Mapping):
            messages = payload["chat"].get("messages")
        if not isinstance(messages, list):
            raise ValueError("Chat payload must contain a 'messages' list")
        return cls.from_messages(messages)

    @classmethod
    def single(cls, text: str) -> "Conversation":
        return cls((Message(USER, text),))

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def last_user_message(self) -> str:
        return self.messages[-1].content

    def tail(self, count: int) -> Tuple[Message, ...]:
        return self.messages[-count:] if count > 0 else ()

    def to_langchain(self) -> List[BaseMessage]:
        return [m.to_langchain() for m in self.messages]

    def format_transcript(self, count: int = 0) -> str:
        messages = self.tail(count) if count else self.messages
        return "\n".join(f"{m.role}: {m.content}" for m in messages)

