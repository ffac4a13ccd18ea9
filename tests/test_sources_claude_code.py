"""Tests for the Claude Code transcript reader."""

import json
from pathlib import Path

import pytest

from session_rounds.sources.claude_code import (
    encode_project_path,
    entry_to_message,
    load_session,
    read_transcript,
    session_file_path,
)

SESSION_ID = "980dc406-0dbf-49b5-86fa-675e1e6e1998"


@pytest.fixture
def sample_jsonl_file(tmp_path: Path) -> Path:
    """Create a sample Claude Code JSONL file."""
    file_path = tmp_path / f"{SESSION_ID}.jsonl"

    lines = [
        # Queue operation (precedes the first prompt)
        {
            "type": "queue-operation",
            "operation": "dequeue",
            "timestamp": "2026-01-26T00:38:34.590Z",
            "sessionId": SESSION_ID,
        },
        # User message with string content
        {
            "type": "user",
            "uuid": "u-1",
            "cwd": "/home/user/project",
            "sessionId": SESSION_ID,
            "timestamp": "2026-01-26T00:38:34.754Z",
            "message": {"role": "user", "content": "Hello, please help me with my code."},
        },
        # Assistant message with tool_use content
        {
            "type": "assistant",
            "uuid": "a-1",
            "cwd": "/home/user/project",
            "sessionId": SESSION_ID,
            "timestamp": "2026-01-26T00:38:40.993Z",
            "costUSD": 0.002,
            "message": {
                "role": "assistant",
                "model": "claude-sonnet-4",
                "usage": {"input_tokens": 12, "output_tokens": 30},
                "content": [
                    {"type": "thinking", "thinking": "hmm"},
                    {"type": "text", "text": "Let me read the file."},
                    {
                        "type": "tool_use",
                        "id": "toolu_123",
                        "name": "Read",
                        "input": {"file_path": "/path/to/file"},
                    },
                ],
            },
        },
        # User message with tool_result content
        {
            "type": "user",
            "uuid": "u-2",
            "cwd": "/home/user/project",
            "sessionId": SESSION_ID,
            "timestamp": "2026-01-26T00:38:42.290Z",
            "message": {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": "toolu_123", "content": "File contents here..."},
                ],
            },
        },
        # Meta user message injected by the client
        {
            "type": "user",
            "isMeta": True,
            "timestamp": "2026-01-26T00:38:43.000Z",
            "message": {"role": "user", "content": "Caveat: local command output follows"},
        },
        # System entry from a hook
        {
            "type": "system",
            "subtype": "stop_hook_summary",
            "content": "hook ran",
            "timestamp": "2026-01-26T00:38:44.000Z",
        },
        # Compaction summary
        {"type": "summary", "summary": "Earlier: fixed imports", "leafUuid": "x"},
    ]

    with open(file_path, "w") as f:
        for line in lines:
            f.write(json.dumps(line) + "\n")
        f.write("{not json\n")
        f.write("\n")

    return file_path


class TestPaths:
    """Tests for project path helpers."""

    def test_encode_project_path(self) -> None:
        assert encode_project_path("/home/user/project") == "-home-user-project"

    def test_session_file_path(self, tmp_path: Path) -> None:
        path = session_file_path(tmp_path, "/home/user/project", "abc")
        assert path == tmp_path / "-home-user-project" / "abc.jsonl"


class TestEntryToMessage:
    """Tests for entry_to_message function."""

    def test_user_entry(self) -> None:
        msg = entry_to_message({"type": "user", "uuid": "u", "timestamp": "t", "message": {"role": "user", "content": "hi"}})
        assert msg is not None
        assert msg["role"] == "user"
        assert msg["content"] == "hi"
        assert msg["uuid"] == "u"
        assert "subType" not in msg

    def test_compact_summary_entry(self) -> None:
        msg = entry_to_message({"type": "user", "isCompactSummary": True, "message": {"role": "user", "content": "s"}})
        assert msg["subType"] == "summary"

    @pytest.mark.parametrize(
        ("subtype", "expected"),
        [
            ("microcompact_boundary", "microcompaction-boundary"),
            ("stop_hook_summary", "hook"),
            ("compact_boundary", "system"),
            (None, "system"),
        ],
    )
    def test_system_entries(self, subtype: str | None, expected: str) -> None:
        msg = entry_to_message({"type": "system", "subtype": subtype, "content": "x"})
        assert msg["role"] == "user"
        assert msg["subType"] == expected

    def test_file_history_snapshot(self) -> None:
        msg = entry_to_message({"type": "file-history-snapshot", "snapshot": {}})
        assert msg["subType"] == "file-history-snapshot"
        assert msg["content"] == []

    def test_unknown_entry_type(self) -> None:
        assert entry_to_message({"type": "progress"}) is None

    def test_user_entry_without_message(self) -> None:
        assert entry_to_message({"type": "user"}) is None


class TestReadTranscript:
    """Tests for read_transcript function."""

    def test_reads_entries_and_project(self, sample_jsonl_file: Path) -> None:
        messages, project = read_transcript(sample_jsonl_file)

        assert project == "/home/user/project"
        assert len(messages) == 7
        assert [m.get("subType") for m in messages] == [
            "queue-operation",
            None,
            None,
            None,
            "system",
            "hook",
            "summary",
        ]


class TestLoadSession:
    """Tests for load_session function."""

    def test_reconstructs_session(self, sample_jsonl_file: Path) -> None:
        session = load_session(sample_jsonl_file)

        assert session.session_id == SESSION_ID
        assert session.project == "/home/user/project"
        assert len(session.preamble) == 1
        assert len(session.rounds) == 1

        [round_] = session.rounds
        assert round_.user_message.uuid == "u-1"
        assert len(round_.assistant_messages) == 5
        assert round_.tokens == 42
        assert round_.tool_call_count == 1

    def test_tool_invocation_timing(self, sample_jsonl_file: Path) -> None:
        session = load_session(sample_jsonl_file)

        [inv] = session.invocations
        assert inv.name == "Read"
        assert inv.output == "File contents here..."
        assert inv.duration_ms == 1297

    def test_thinking_blocks_skipped(self, sample_jsonl_file: Path) -> None:
        session = load_session(sample_jsonl_file)

        reply = session.rounds[0].assistant_messages[0]
        assert reply.text == "Let me read the file."
        assert len(reply.content) == 2

    def test_project_override(self, sample_jsonl_file: Path) -> None:
        session = load_session(sample_jsonl_file, project="/elsewhere")
        assert session.project == "/elsewhere"
