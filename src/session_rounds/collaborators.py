"""Interfaces for services the engine hands work to.

The engine performs no I/O. File snapshots, clipboard access and AI
summaries are provided by the host application through these
interfaces; the engine only supplies the data they need.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from session_rounds.engine.summary import round_transcript
from session_rounds.logging import get_logger
from session_rounds.models import Message, Round, Session

logger = get_logger("collaborators")


class FileSnapshotProvider(ABC):
    """Retrieves the content of a file as it was at a given message."""

    @abstractmethod
    def read_snapshot(self, session_id: str, message_id: str, file_path: str) -> str | None:
        """Return the file content, or None if no snapshot exists."""


class ClipboardWriter(ABC):
    @abstractmethod
    def write(self, text: str) -> bool:
        """Write text to the clipboard, returning whether it succeeded."""


class SummaryStreamer(ABC):
    """Streams an AI-generated summary of a text payload."""

    @abstractmethod
    def stream(
        self,
        payload: str,
        on_chunk: Callable[[str], None],
        on_complete: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Start summarizing payload, reporting through the callbacks."""


def read_message_snapshot(
    provider: FileSnapshotProvider,
    session: Session,
    message: Message,
    file_path: str,
) -> str | None:
    """Fetch a file snapshot keyed by session, message and path.

    Messages without a uuid cannot be looked up and return None.
    """
    if not message.uuid:
        return None
    return provider.read_snapshot(session.session_id, message.uuid, file_path)


def copy_round(round_: Round, clipboard: ClipboardWriter) -> bool:
    """Copy a round's transcript to the clipboard."""
    ok = clipboard.write(round_transcript(round_))
    if not ok:
        logger.warning("Clipboard write failed for round %d", round_.index)
    return ok


def summarize_round(
    round_: Round,
    streamer: SummaryStreamer,
    on_chunk: Callable[[str], None],
    on_complete: Callable[[], None],
    on_error: Callable[[str], None],
) -> None:
    """Request a streamed summary of a round.

    A round without any text produces an error callback and no request.
    """
    if not round_.user_message.text.strip() and not any(
        msg.text.strip() for msg in round_.assistant_messages
    ):
        on_error("Nothing to summarize")
        return
    streamer.stream(round_transcript(round_), on_chunk, on_complete, on_error)
