"""Real user prompt classification.

A "real" prompt is a user-authored message with text or image content.
Everything else carried with the user role (tool result carriers,
system, summary and hook messages, bookkeeping entries) is treated as an
internal continuation of the current round.
"""

from session_rounds.models import ImageBlock, Message, TextBlock, ToolResultBlock

INTERNAL_SUB_TYPES = frozenset(
    {
        "system",
        "summary",
        "hook",
        "microcompaction-boundary",
        "queue-operation",
        "file-history-snapshot",
    }
)


def is_tool_result_carrier(message: Message) -> bool:
    """Whether the message holds only tool results."""
    return bool(message.content) and all(
        isinstance(block, ToolResultBlock) for block in message.content
    )


def is_real_user_prompt(message: Message) -> bool:
    """Decide whether a message starts a new round.

    Args:
        message: Decoded message

    Returns:
        True if the message is a user-authored prompt
    """
    if message.role != "user":
        return False

    if message.sub_type in INTERNAL_SUB_TYPES:
        return False

    if is_tool_result_carrier(message):
        return False

    for block in message.content:
        if isinstance(block, TextBlock) and block.text.strip():
            return True
        if isinstance(block, ImageBlock):
            return True
    return False
