"""Display helpers for reconstructed sessions."""

import json
from typing import Any

from session_rounds.models import Message

ELLIPSIS = "..."

SUB_TYPE_LABELS = {
    "system": "System",
    "summary": "Summary",
    "hook": "Hook",
    "microcompaction-boundary": "Compaction boundary",
    "queue-operation": "Queue operation",
    "file-history-snapshot": "File snapshot",
}


def format_duration(ms: int) -> str:
    """Format a duration: "850ms", "2.5s" or "1.5m"."""
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    return f"{ms / 60000:.1f}m"


def truncate_text(text: str, max_len: int) -> str:
    """Cut text to max_len characters, marking the cut with an ellipsis."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + ELLIPSIS


def to_display_text(value: Any) -> str:
    """Strings as-is, anything else as indented JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def input_preview(tool_input: Any, max_len: int = 80) -> str:
    return truncate_text(to_display_text(tool_input), max_len)


def output_preview(output: Any, max_len: int = 2000) -> str:
    return truncate_text(to_display_text(output), max_len)


def sub_type_label(sub_type: str | None) -> str | None:
    """Tag label for a message sub type; None for ordinary messages."""
    if not sub_type or sub_type in ("user", "assistant"):
        return None
    return SUB_TYPE_LABELS.get(sub_type, sub_type)


def prompt_text(message: Message) -> str:
    """Text of a user prompt."""
    return message.text
