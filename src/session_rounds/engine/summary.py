"""Plain-text renderings of rounds.

Used as the payload for clipboard copies and AI summaries.
"""

from collections.abc import Sequence

from session_rounds.engine.formatting import prompt_text
from session_rounds.models import ImageBlock, Round, TextBlock, ToolResultBlock, ToolUseBlock

PROMPT_HEADER = "========== User Prompt =========="
ASSISTANT_HEADER = "========== Assistant =========="
ROUND_SEPARATOR = "\n---\n\n"


def round_transcript(round_: Round) -> str:
    """Render a round as text.

    The prompt's text comes first, followed by one section per message
    after it. Tool calls and results are shown as markers only.
    """
    text = f"{PROMPT_HEADER}\n\n{prompt_text(round_.user_message)}\n\n"

    for msg in round_.assistant_messages:
        text += f"{ASSISTANT_HEADER}\n\n"
        for block in msg.content:
            if isinstance(block, TextBlock):
                if block.text:
                    text += block.text + "\n"
            elif isinstance(block, ToolUseBlock):
                text += f"[Tool call: {block.name}]\n"
            elif isinstance(block, ToolResultBlock):
                text += "[Tool error]\n" if block.is_error else "[Tool result]\n"
            elif isinstance(block, ImageBlock):
                text += "[Image]\n"
        text += "\n"

    return text


def session_transcript(rounds: Sequence[Round]) -> str:
    """Render several rounds, each headed by its 1-based number."""
    return ROUND_SEPARATOR.join(
        f"[Round {r.index + 1}]\n{round_transcript(r)}" for r in rounds
    )
