"""Tolerant decoder from loosely-typed message dicts to typed models.

Accepted message shape:
- role: "user" or "assistant"
- subType / subtype: optional internal message kind
- timestamp: unix seconds, unix millis, numeric string or ISO 8601 string
- content: string or array of content blocks
- usage: optional {input_tokens, output_tokens, cache_read_input_tokens, ...}
- cost_usd / costUSD, model, uuid: optional

Content blocks:
- {"type": "text", "text": ...}
- {"type": "image", "source": {"media_type": ..., "data": ...}}
- {"type": "tool_use", "id": ..., "name": ..., "input": ...}
- {"type": "tool_result", "tool_use_id": ..., "content": ..., "is_error": ...}
"""

import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from session_rounds.logging import get_logger
from session_rounds.models import (
    ContentBlock,
    ImageBlock,
    Message,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
)

logger = get_logger("engine.decoder")

ROLES = ("user", "assistant")

# Values below this are unix seconds, at or above are unix millis
SECONDS_THRESHOLD = 1e12


class MalformedInputError(ValueError):
    """A message or content block failed validation.

    Attributes:
        field: Name of the offending field
    """

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


def normalize_timestamp(value: Any) -> int:
    """Normalize a timestamp to unix milliseconds.

    Numbers below 1e12 are treated as seconds, anything else as
    milliseconds. Strings may hold a number or an ISO 8601 date.
    Unparsable, missing or non-positive values normalize to 0 ("unknown").

    Args:
        value: Raw timestamp value

    Returns:
        Unix timestamp in milliseconds, or 0
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value) or value <= 0:
                return 0
            if value < SECONDS_THRESHOLD:
                return int(round(value * 1000))
            return int(value)
        except (OverflowError, ValueError):
            # Integers too large to represent as a float
            return 0

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return normalize_timestamp(float(text))
        except ValueError:
            pass
        try:
            # Handle ISO 8601 with optional microseconds and Z suffix
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            dt = datetime.fromisoformat(text)
        except ValueError:
            return 0
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return max(int(round(dt.timestamp() * 1000)), 0)

    return 0


def _optional_str(raw: dict, key: str) -> str | None:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    raise MalformedInputError(key, f"expected string, got {type(value).__name__}")


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(int(value), 0)


def _cost(value: Any) -> float | None:
    """Cost in USD; non-finite or unrepresentable values count as unknown."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInputError("cost_usd", f"expected number, got {type(value).__name__}")
    try:
        cost = float(value)
    except OverflowError:
        return None
    return cost if math.isfinite(cost) else None


def decode_block(raw: Any) -> ContentBlock:
    """Decode a single content block.

    Raises:
        MalformedInputError: If the block type is unknown or a field has
            the wrong type
    """
    if isinstance(raw, str):
        return TextBlock(text=raw)
    if not isinstance(raw, dict):
        raise MalformedInputError("content", f"expected object, got {type(raw).__name__}")

    block_type = raw.get("type")

    if block_type == "text":
        return TextBlock(text=_optional_str(raw, "text") or "")

    if block_type == "image":
        source = raw.get("source")
        if not isinstance(source, dict):
            raise MalformedInputError("source", "image block without source")
        media_type = source.get("media_type")
        data = source.get("data")
        if not isinstance(media_type, str) or not media_type:
            raise MalformedInputError("source.media_type", "missing or not a string")
        if not isinstance(data, str) or not data:
            raise MalformedInputError("source.data", "missing or not a string")
        return ImageBlock(media_type=media_type, data=data)

    if block_type == "tool_use":
        return ToolUseBlock(
            id=_optional_str(raw, "id"),
            name=_optional_str(raw, "name"),
            input=raw.get("input"),
        )

    if block_type == "tool_result":
        return ToolResultBlock(
            tool_use_id=_optional_str(raw, "tool_use_id"),
            content=raw.get("content"),
            is_error=bool(raw.get("is_error") or False),
        )

    raise MalformedInputError("type", f"unsupported content block type {block_type!r}")


def decode_content(raw: Any) -> tuple[ContentBlock, ...]:
    """Decode a content field, skipping blocks that fail validation."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (TextBlock(text=raw),)
    if not isinstance(raw, list):
        raise MalformedInputError("content", f"expected string or array, got {type(raw).__name__}")

    blocks: list[ContentBlock] = []
    for position, item in enumerate(raw):
        try:
            blocks.append(decode_block(item))
        except MalformedInputError as e:
            logger.debug("Skipping content block %d: %s", position, e)
    return tuple(blocks)


def decode_usage(raw: Any) -> Usage | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise MalformedInputError("usage", f"expected object, got {type(raw).__name__}")
    return Usage(
        input_tokens=_count(raw.get("input_tokens")),
        output_tokens=_count(raw.get("output_tokens")),
        cache_read_input_tokens=_count(raw.get("cache_read_input_tokens")),
        cache_creation_input_tokens=_count(raw.get("cache_creation_input_tokens")),
    )


def decode_message(raw: Any) -> Message:
    """Decode one message.

    Args:
        raw: Loosely-typed message dict

    Returns:
        Decoded Message

    Raises:
        MalformedInputError: If the message cannot be decoded; ``field``
            names the offending field
    """
    if not isinstance(raw, dict):
        raise MalformedInputError("message", f"expected object, got {type(raw).__name__}")

    role = raw.get("role")
    if role not in ROLES:
        raise MalformedInputError("role", f"expected one of {ROLES}, got {role!r}")

    sub_type = raw.get("subType", raw.get("subtype"))
    if sub_type is not None and not isinstance(sub_type, str):
        raise MalformedInputError("subType", f"expected string, got {type(sub_type).__name__}")

    cost = _cost(raw.get("cost_usd", raw.get("costUSD")))

    uuid = raw.get("uuid", raw.get("id"))
    if uuid is not None and not isinstance(uuid, str):
        raise MalformedInputError("uuid", f"expected string, got {type(uuid).__name__}")

    return Message(
        role=role,
        content=decode_content(raw.get("content")),
        timestamp=normalize_timestamp(raw.get("timestamp")),
        sub_type=sub_type or None,
        usage=decode_usage(raw.get("usage")),
        cost_usd=cost,
        model=_optional_str(raw, "model"),
        uuid=uuid,
    )


def decode_messages(raws: Iterable[Any]) -> list[Message]:
    """Decode a message log, skipping records that fail validation.

    One bad record never prevents the rest of the log from decoding.
    """
    messages: list[Message] = []
    for position, raw in enumerate(raws):
        try:
            messages.append(decode_message(raw))
        except MalformedInputError as e:
            logger.warning("Skipping malformed message #%d (%s): %s", position, e.field, e.reason)
    return messages
