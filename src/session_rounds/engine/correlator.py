"""Correlate tool calls with their results.

Tool calls and results arrive in different messages. Invocations are
kept in call order in a list, and a map from tool_use id to list index
tracks which of them are still pending. The first result for a pending
id resolves it; later results for that id, and results whose id was
never seen in the window, are orphans and are dropped. A call that
reuses a pending id marks the earlier invocation as superseded, so
at most one invocation per id is pending at any time.
"""

from collections.abc import Iterable

from session_rounds.logging import get_logger
from session_rounds.models import (
    ImageBlock,
    Message,
    TextBlock,
    ToolInvocation,
    ToolResultBlock,
    ToolUseBlock,
)

logger = get_logger("engine.correlator")


def compute_duration(call_ts: int | None, result_ts: int | None) -> int | None:
    """Milliseconds between call and result.

    Returns None when either timestamp is unknown (0 or None) or the
    result precedes the call.
    """
    if not call_ts or not result_ts:
        return None
    if result_ts < call_ts:
        return None
    return result_ts - call_ts


class ToolCorrelator:
    """Incremental tool call/result matcher over one correlation window."""

    def __init__(self) -> None:
        self._invocations: list[ToolInvocation] = []
        self._pending: dict[str, int] = {}
        self.orphan_results = 0

    @property
    def invocations(self) -> list[ToolInvocation]:
        """All invocations in call order, resolved or not."""
        return list(self._invocations)

    def pending(self) -> list[ToolInvocation]:
        """Invocations that have not received a result."""
        return [inv for inv in self._invocations if inv.is_pending]

    def resolved(self) -> list[ToolInvocation]:
        return [inv for inv in self._invocations if inv.is_resolved]

    def is_pending(self, tool_use_id: str) -> bool:
        return tool_use_id in self._pending

    def observe(self, message: Message) -> None:
        """Scan one message's content blocks in document order."""
        for block in message.content:
            if isinstance(block, ToolUseBlock):
                self._on_call(block, message.timestamp)
            elif isinstance(block, ToolResultBlock):
                self._on_result(block, message.timestamp)
            elif isinstance(block, (TextBlock, ImageBlock)):
                continue
            else:
                raise TypeError(f"Unhandled content block: {type(block).__name__}")

    def _on_call(self, block: ToolUseBlock, timestamp: int) -> None:
        if not block.id or not block.name:
            logger.debug("Skipping tool_use without id or name")
            return

        previous = self._pending.get(block.id)
        if previous is not None:
            self._invocations[previous].superseded = True
            logger.debug("tool_use id %s reused while pending", block.id)

        invocation = ToolInvocation(
            id=block.id,
            name=block.name,
            input=block.input,
            call_timestamp=timestamp,
            sequence_index=len(self._invocations),
        )
        self._pending[block.id] = len(self._invocations)
        self._invocations.append(invocation)

    def _on_result(self, block: ToolResultBlock, timestamp: int) -> None:
        if not block.tool_use_id:
            logger.debug("Skipping tool_result without tool_use_id")
            return

        position = self._pending.pop(block.tool_use_id, None)
        if position is None:
            self.orphan_results += 1
            logger.debug("Orphan tool_result for %s", block.tool_use_id)
            return

        invocation = self._invocations[position]
        invocation.output = block.content
        invocation.is_error = block.is_error
        invocation.result_timestamp = timestamp or None
        invocation.duration_ms = compute_duration(invocation.call_timestamp, timestamp)
        invocation.is_resolved = True


def correlate(messages: Iterable[Message]) -> list[ToolInvocation]:
    """Build tool invocations for a window of messages.

    Args:
        messages: Messages in log order (a whole session or a single round)

    Returns:
        Invocations in call order; unmatched calls keep output None
    """
    correlator = ToolCorrelator()
    for message in messages:
        correlator.observe(message)
    return correlator.invocations
