"""Session reconstruction from a raw message log."""

from collections.abc import Iterable
from typing import Any

from session_rounds.config import CORRELATION_WINDOWS, ReconstructionConfig
from session_rounds.engine import correlate, decode_messages, segment
from session_rounds.logging import get_logger
from session_rounds.models import Session, ToolInvocation

logger = get_logger("session")


def reconstruct_session(
    project: str,
    session_id: str,
    raw_messages: Iterable[Any],
    config: ReconstructionConfig | None = None,
) -> Session:
    """Decode a message log and derive its rounds and tool invocations.

    Always recomputes everything from the given log. Malformed records
    are skipped, so a damaged log still yields a (partial) session.

    Args:
        project: Project identifier (usually the working directory)
        session_id: Session identifier
        raw_messages: Loosely-typed message dicts in log order
        config: Reconstruction settings (defaults apply when None)

    Returns:
        Reconstructed Session
    """
    if config is None:
        config = ReconstructionConfig()
    if config.correlation_window not in CORRELATION_WINDOWS:
        raise ValueError(f"Invalid correlation_window: {config.correlation_window!r}")

    messages = decode_messages(raw_messages)
    segmentation = segment(messages)

    if config.correlation_window == "round":
        invocations: list[ToolInvocation] = []
        for round_ in segmentation.rounds:
            invocations.extend(correlate(round_.messages))
    else:
        invocations = correlate(messages)

    pending = sum(1 for inv in invocations if inv.is_pending)
    logger.debug(
        "Reconstructed session %s: messages=%d rounds=%d tools=%d pending=%d",
        session_id,
        len(messages),
        len(segmentation.rounds),
        len(invocations),
        pending,
    )

    return Session(
        project=project,
        session_id=session_id,
        messages=messages,
        rounds=segmentation.rounds,
        invocations=invocations,
        preamble=segmentation.preamble if config.keep_preamble else [],
    )


def round_invocations(session: Session, index: int) -> list[ToolInvocation]:
    """Tool invocations correlated within a single round.

    Results whose call happened in an earlier round are orphans in this
    window and do not appear.

    Raises:
        IndexError: If the session has no round with that index
    """
    return correlate(session.rounds[index].messages)
