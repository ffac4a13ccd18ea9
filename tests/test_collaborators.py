"""Tests for collaborator helpers."""

from unittest.mock import MagicMock

import pytest

from builders import assistant, image_block, tool_use, user
from session_rounds.collaborators import (
    ClipboardWriter,
    FileSnapshotProvider,
    SummaryStreamer,
    copy_round,
    read_message_snapshot,
    summarize_round,
)
from session_rounds.session import reconstruct_session


@pytest.fixture
def session():
    return reconstruct_session(
        "/proj",
        "sess-1",
        [
            user("explain this", uuid="m-1"),
            assistant("it does X"),
            {"role": "user", "content": [image_block()]},
            tool_use("t", "Read"),
        ],
    )


class TestReadMessageSnapshot:
    """Tests for read_message_snapshot function."""

    def test_keys_by_session_message_and_path(self, session) -> None:
        provider = MagicMock(spec=FileSnapshotProvider)
        provider.read_snapshot.return_value = "print('hi')"

        content = read_message_snapshot(provider, session, session.rounds[0].user_message, "a.py")

        assert content == "print('hi')"
        provider.read_snapshot.assert_called_once_with("sess-1", "m-1", "a.py")

    def test_message_without_uuid(self, session) -> None:
        provider = MagicMock(spec=FileSnapshotProvider)

        assert read_message_snapshot(provider, session, session.rounds[1].user_message, "a.py") is None
        provider.read_snapshot.assert_not_called()


class TestCopyRound:
    """Tests for copy_round function."""

    def test_writes_transcript(self, session) -> None:
        clipboard = MagicMock(spec=ClipboardWriter)
        clipboard.write.return_value = True

        assert copy_round(session.rounds[0], clipboard) is True
        written = clipboard.write.call_args.args[0]
        assert "explain this" in written
        assert "it does X" in written

    def test_reports_failure(self, session) -> None:
        clipboard = MagicMock(spec=ClipboardWriter)
        clipboard.write.return_value = False

        assert copy_round(session.rounds[0], clipboard) is False


class TestSummarizeRound:
    """Tests for summarize_round function."""

    def test_streams_round_text(self, session) -> None:
        streamer = MagicMock(spec=SummaryStreamer)
        on_chunk, on_complete, on_error = MagicMock(), MagicMock(), MagicMock()

        summarize_round(session.rounds[0], streamer, on_chunk, on_complete, on_error)

        payload, *callbacks = streamer.stream.call_args.args
        assert "explain this" in payload
        assert callbacks == [on_chunk, on_complete, on_error]
        on_error.assert_not_called()

    def test_round_without_text_reports_error(self, session) -> None:
        streamer = MagicMock(spec=SummaryStreamer)
        on_error = MagicMock()

        summarize_round(session.rounds[1], streamer, MagicMock(), MagicMock(), on_error)

        streamer.stream.assert_not_called()
        on_error.assert_called_once_with("Nothing to summarize")
