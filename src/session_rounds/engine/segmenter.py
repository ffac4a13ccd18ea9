"""Partition a message sequence into rounds."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from session_rounds.engine.classifier import is_real_user_prompt
from session_rounds.logging import get_logger
from session_rounds.models import Message, Round, ToolUseBlock

logger = get_logger("engine.segmenter")


@dataclass
class Segmentation:
    """Result of segmenting a message sequence.

    ``preamble`` holds the messages seen before the first real prompt,
    which belong to no round.
    """

    rounds: list[Round] = field(default_factory=list)
    preamble: list[Message] = field(default_factory=list)


def build_round(index: int, user_message: Message, assistant_messages: list[Message]) -> Round:
    """Create a round and compute its aggregates."""
    tokens = 0
    cost = 0.0
    tool_calls = 0

    for msg in assistant_messages:
        if msg.usage is not None:
            tokens += msg.usage.total
        cost += msg.cost_usd or 0.0
        tool_calls += sum(1 for block in msg.content if isinstance(block, ToolUseBlock))

    return Round(
        index=index,
        user_message=user_message,
        assistant_messages=assistant_messages,
        tokens=tokens,
        cost=cost,
        tool_call_count=tool_calls,
        timestamp=user_message.timestamp,
    )


def segment(messages: Sequence[Message]) -> Segmentation:
    """Split messages into rounds in a single pass.

    A round starts at each real user prompt and collects every following
    message until the next one. Input order is never changed.

    Args:
        messages: Messages in log order

    Returns:
        Segmentation with rounds and the preamble
    """
    result = Segmentation()
    current_user: Message | None = None
    current_assistants: list[Message] = []

    def flush() -> None:
        if current_user is not None:
            result.rounds.append(build_round(len(result.rounds), current_user, current_assistants))

    for msg in messages:
        if is_real_user_prompt(msg):
            flush()
            current_user = msg
            current_assistants = []
        elif current_user is None:
            result.preamble.append(msg)
        else:
            current_assistants.append(msg)

    flush()

    if result.preamble:
        logger.debug("%d message(s) precede the first real prompt", len(result.preamble))

    return result


def segment_rounds(messages: Sequence[Message]) -> list[Round]:
    """Rounds of a message sequence, without the preamble."""
    return segment(messages).rounds
