"""
Progress indicators shown while a turn is being processed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Tuple

from rag_chat.config.constants import IndicatorIcon


@dataclass(frozen=True)
class ProgressIndicator:
    status: str
    icon: IndicatorIcon
    is_terminal: bool = False

    @property
    def is_error(self) -> bool:
        return self.icon == IndicatorIcon.ERROR

    def to_dict(self) -> dict:
        return {"status": self.status, "icon": self.icon.value, "isTerminal": self.is_terminal}


class ProgressTracker:
    """
    Append-only indicator list for one turn.

    Only the newest entry can be in flight; appending a new entry settles the
    previous one as a completed, non-terminal stage. finish() marks the last
    entry terminal once the final answer is ready.
    """

    def __init__(self) -> None:
        self._entries: List[ProgressIndicator] = []
        self._finished = False

    def append(self, status: str, icon: IndicatorIcon) -> Tuple[ProgressIndicator, ...]:
        if self._finished:
            raise RuntimeError("Cannot append progress after the turn finished")
        self._entries.append(ProgressIndicator(status=status, icon=icon))
        return self.snapshot()

    def finish(self) -> Tuple[ProgressIndicator, ...]:
        if self._entries and not self._finished:
            self._entries[-1] = replace(self._entries[-1], is_terminal=True)
        self._finished = True
        return self.snapshot()

    def snapshot(self) -> Tuple[ProgressIndicator, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
