"""Reader for Claude Code conversation transcripts.

Claude Code stores conversations as JSONL files at:
    ~/.claude/projects/<encoded-project-path>/<session-id>.jsonl

Each line is a JSON object with:
- type: "user", "assistant", "system", "summary", "queue-operation", ...
- message.role: "user" or "assistant"
- message.content: string or array of content blocks
- message.usage / message.model: token counts and model (assistant only)
- timestamp: ISO 8601 timestamp
- uuid: message identifier
- isMeta / isCompactSummary: internal user entries
- cwd: Working directory (project path)

Entries are converted to plain message dicts for the decoder; all
bookkeeping entries are carried with the user role and a subType.
"""

import json
from pathlib import Path
from typing import Any

from session_rounds.config import ReconstructionConfig
from session_rounds.logging import get_logger
from session_rounds.models import Session
from session_rounds.session import reconstruct_session

logger = get_logger("sources.claude_code")

BOOKKEEPING_TYPES = ("queue-operation", "file-history-snapshot")


def encode_project_path(project: str) -> str:
    """Folder name Claude Code uses for a project path."""
    return project.replace("/", "-")


def session_file_path(projects_dir: Path, project: str, session_id: str) -> Path:
    """Location of a session transcript under the projects directory."""
    return projects_dir / encode_project_path(project) / f"{session_id}.jsonl"


def _system_sub_type(entry: dict) -> str:
    subtype = str(entry.get("subtype") or "")
    if "microcompact" in subtype:
        return "microcompaction-boundary"
    if "hook" in subtype:
        return "hook"
    return "system"


def entry_to_message(entry: dict) -> dict[str, Any] | None:
    """Convert one transcript entry to a message dict.

    Args:
        entry: Parsed JSONL entry

    Returns:
        Message dict, or None for entries that carry no message
    """
    entry_type = entry.get("type")
    base: dict[str, Any] = {
        "timestamp": entry.get("timestamp"),
        "uuid": entry.get("uuid"),
    }

    if entry_type in ("user", "assistant"):
        message = entry.get("message")
        if not isinstance(message, dict):
            return None
        result = {
            **base,
            "role": message.get("role", entry_type),
            "content": message.get("content"),
            "usage": message.get("usage"),
            "model": message.get("model"),
            "costUSD": entry.get("costUSD"),
        }
        if entry.get("isCompactSummary"):
            result["subType"] = "summary"
        elif entry.get("isMeta"):
            result["subType"] = "system"
        return result

    if entry_type == "system":
        return {
            **base,
            "role": "user",
            "subType": _system_sub_type(entry),
            "content": entry.get("content") or "",
        }

    if entry_type == "summary":
        return {
            **base,
            "role": "user",
            "subType": "summary",
            "content": entry.get("summary") or "",
        }

    if entry_type in BOOKKEEPING_TYPES:
        return {**base, "role": "user", "subType": entry_type, "content": []}

    return None


def read_transcript(path: Path) -> tuple[list[dict[str, Any]], str]:
    """Read a transcript file into message dicts.

    Args:
        path: Path to the JSONL file

    Returns:
        Tuple of (message dicts in file order, project path from cwd)
    """
    messages: list[dict[str, Any]] = []
    project = ""

    with open(path, "rb") as f:
        for line_number, line in enumerate(f, start=1):
            line_text = line.decode("utf-8", errors="replace").strip()

            if not line_text:
                continue

            try:
                entry = json.loads(line_text)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed line %d in %s", line_number, path)
                continue

            if not isinstance(entry, dict):
                continue

            if not project and entry.get("cwd"):
                project = entry["cwd"]

            message = entry_to_message(entry)
            if message is not None:
                messages.append(message)

    return messages, project


def load_session(
    path: Path,
    project: str | None = None,
    config: ReconstructionConfig | None = None,
) -> Session:
    """Read and reconstruct a Claude Code session file.

    The session id is taken from the filename
    (e.g. "980dc406-0dbf-49b5-86fa-675e1e6e1998.jsonl").
    """
    messages, cwd = read_transcript(path)
    logger.info("Loaded %d messages from %s", len(messages), path)
    return reconstruct_session(project or cwd, path.stem, messages, config)
