"""Per-round and per-session statistics and inline image resolution."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from session_rounds.engine.correlator import correlate
from session_rounds.models import (
    ExtractedImage,
    ImageBlock,
    ImageReference,
    Message,
    Round,
    Session,
    ToolInvocation,
)

IMAGE_REF_PATTERN = re.compile(r"\[Image #(\d+)\]")


@dataclass
class ToolStats:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    pending: int = 0
    superseded: int = 0


@dataclass
class ToolUsage:
    """Call statistics for one tool name."""

    name: str
    count: int = 0
    errors: int = 0
    avg_duration_ms: int | None = None  # over resolved calls with a duration


@dataclass
class UsageTotals:
    tokens: int = 0  # input + output
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cost: float = 0.0


@dataclass
class RoundStats:
    index: int
    usage: UsageTotals
    tools: ToolStats
    image_count: int = 0


@dataclass
class SessionStats:
    round_count: int
    message_count: int
    usage: UsageTotals
    tools: ToolStats
    tool_usage: list[ToolUsage] = field(default_factory=list)
    models: list[str] = field(default_factory=list)


def tool_stats(invocations: Iterable[ToolInvocation]) -> ToolStats:
    """Count invocations split by outcome."""
    stats = ToolStats()
    for inv in invocations:
        stats.total += 1
        if inv.superseded:
            stats.superseded += 1
        elif inv.is_pending:
            stats.pending += 1
        elif inv.is_error:
            stats.failed += 1
        else:
            stats.succeeded += 1
    return stats


def tool_usage(invocations: Iterable[ToolInvocation]) -> list[ToolUsage]:
    """Per tool name call counts, errors and average duration.

    Sorted by call count (descending), then by name.
    """
    by_name: dict[str, ToolUsage] = {}
    durations: dict[str, list[int]] = {}
    for inv in invocations:
        usage = by_name.setdefault(inv.name, ToolUsage(name=inv.name))
        usage.count += 1
        if inv.is_resolved and inv.is_error:
            usage.errors += 1
        if inv.is_resolved and inv.duration_ms is not None:
            durations.setdefault(inv.name, []).append(inv.duration_ms)

    for name, values in durations.items():
        by_name[name].avg_duration_ms = round(sum(values) / len(values))

    return sorted(by_name.values(), key=lambda u: (-u.count, u.name))


def usage_totals(messages: Iterable[Message]) -> UsageTotals:
    """Sum token usage and cost over messages."""
    totals = UsageTotals()
    for msg in messages:
        if msg.usage is not None:
            totals.tokens += msg.usage.total
            totals.input_tokens += msg.usage.input_tokens
            totals.output_tokens += msg.usage.output_tokens
            totals.cache_read_tokens += msg.usage.cache_read_input_tokens
        totals.cost += msg.cost_usd or 0.0
    return totals


def round_stats(round_: Round, invocations: Sequence[ToolInvocation] | None = None) -> RoundStats:
    """Statistics for one round.

    Args:
        round_: The round
        invocations: Invocations to count; defaults to correlating the
            round's own messages

    Returns:
        RoundStats for the round
    """
    if invocations is None:
        invocations = correlate(round_.messages)
    return RoundStats(
        index=round_.index,
        usage=usage_totals(round_.assistant_messages),
        tools=tool_stats(invocations),
        image_count=len(extract_images(round_)),
    )


def session_stats(session: Session) -> SessionStats:
    """Statistics over every message of a session, preamble included."""
    models: list[str] = []
    for msg in session.messages:
        if msg.model and msg.model not in models:
            models.append(msg.model)

    return SessionStats(
        round_count=len(session.rounds),
        message_count=len(session.messages),
        usage=usage_totals(session.messages),
        tools=tool_stats(session.invocations),
        tool_usage=tool_usage(session.invocations),
        models=models,
    )


def extract_images(round_: Round) -> list[ExtractedImage]:
    """Inline images of a round, numbered from 1 in first-encounter order."""
    images: list[ExtractedImage] = []
    for msg in round_.messages:
        for block in msg.content:
            if isinstance(block, ImageBlock):
                images.append(
                    ExtractedImage(
                        number=len(images) + 1,
                        media_type=block.media_type,
                        data=block.data,
                    )
                )
    return images


def resolve_image(number: int, images: Sequence[ExtractedImage]) -> ExtractedImage | None:
    """The Nth image (1-indexed), or None when out of range."""
    if 1 <= number <= len(images):
        return images[number - 1]
    return None


def find_image_references(text: str, images: Sequence[ExtractedImage]) -> list[ImageReference]:
    """Locate ``[Image #N]`` markers in text and resolve them positionally."""
    return [
        ImageReference(
            number=int(match.group(1)),
            start=match.start(),
            end=match.end(),
            image=resolve_image(int(match.group(1)), images),
        )
        for match in IMAGE_REF_PATTERN.finditer(text)
    ]
