from __future__ import annotations

import asyncio
from logging import Logger
from typing import List, NoReturn

from rag_chat.agents.orchestrator_system import OrchestratorSystem
from rag_chat.helpers.bootstrap import init
from rag_chat.schema import (
    ChartBlock,
    Conversation,
    FinalAnswer,
    Message,
    ProgressUpdate,
    TableBlock,
    TextChunk,
    TurnAnswer,
)
from rag_chat.utils.exceptions import RagChatError


def _render_table(table: TableBlock) -> str:
    keys = table.column_keys
    headers = [c.label for c in table.columns]
    cells = [[str(row.get(k, "")) for k in keys] for row in table.rows]
    widths = [max(len(h), *(len(r[i]) for r in cells)) for i, h in enumerate(headers)]
    lines = [" | ".join(h.ljust(w) for h, w in zip(headers, widths))]
    lines.append("-+-".join("-" * w for w in widths))
    lines.extend(" | ".join(c.ljust(w) for c, w in zip(row, widths)) for row in cells)
    return "\n".join(lines)


def _render_chart(chart: ChartBlock) -> str:
    lines = [f"[{chart.chart_type} chart: {chart.y_key} by {chart.x_key}]"]
    values = []
    for point in chart.data:
        try:
            values.append(float(point[chart.y_key]))
        except (TypeError, ValueError):
            values.append(0.0)
    peak = max(values) if values and max(values) > 0 else 1.0
    label_width = max(len(str(p[chart.x_key])) for p in chart.data)
    for point, value in zip(chart.data, values):
        bar = "#" * max(1, int(30 * value / peak)) if value > 0 else ""
        lines.append(f"{str(point[chart.x_key]).ljust(label_width)} {bar} {point[chart.y_key]}")
    return "\n".join(lines)


def _render_sources(answer: TurnAnswer) -> str:
    return "\n".join(f"[{e.citation_index}] {e.source_id}" for e in answer.excerpts)


def _render_structured(answer: TurnAnswer) -> str:
    return "\n\n".join([
        answer.structured.text.content,
        _render_table(answer.structured.table),
        _render_chart(answer.structured.chart),
    ])


async def _query_mode(orchestrator: OrchestratorSystem, history: List[Message], log: Logger) -> None:
    conversation = Conversation.from_messages(history)
    answer = None
    shown = 0
    streaming = False
    async for event in orchestrator.handle_turn(conversation):
        if isinstance(event, ProgressUpdate):
            for indicator in event.indicators[shown:]:
                print(f"  ... [{indicator.icon.value}] {indicator.status}")
            shown = len(event.indicators)
        elif isinstance(event, TextChunk):
            if not streaming:
                print("\n--- Answer ---")
                streaming = True
            elif event.restart:
                print("\n(answer interrupted, starting over)")
            print(event.text, end="", flush=True)
        elif isinstance(event, FinalAnswer):
            answer = event.answer

    if streaming:
        print()
    else:
        print("\n--- Answer ---")
    if answer.is_structured:
        print(_render_structured(answer))
    elif answer.excerpts:
        print(f"\nSources:\n{_render_sources(answer)}")
    print("--------------")
    log.debug(f"Turn finished with intent={answer.intent.value}")
    history.append(Message("assistant", answer.structured.text.content if answer.is_structured else answer.text))


async def _system(log: Logger, orchestrator: OrchestratorSystem) -> None:
    history: List[Message] = []
    print("==============================================")
    print(" RAG Chat Assistant")
    print("Type your message.")
    print("Type 'reset' to start a new conversation.")
    print("Type 'exit' or 'quit' to exit.")
    print("==============================================")
    while True:
        try:
            query = (await asyncio.to_thread(input, ">>> ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting. Goodbye!")
            break

        if not query:
            print("no message entered")
            continue

        if query.lower() in {"exit", "quit", "q"}:
            print("Goodbye!")
            break
        if query.lower() == "reset":
            history.clear()
            print("conversation cleared")
            continue

        history.append(Message("user", query))
        try:
            await _query_mode(orchestrator, history, log)
        except (RagChatError, ValueError) as e:
            log.error(f"Error while handling message: {e}", exc_info=True)
            print(f"Error: failed to answer the message: {e}")
            history.pop()


def main() -> NoReturn:
    log, orchestrator = init()
    asyncio.run(_system(log, orchestrator))


if __name__ == "__main__":
    main()
