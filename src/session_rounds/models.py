"""Canonical data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Usage:
    """Token counts reported for an assistant message."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0

    @property
    def total(self) -> int:
        """Tokens counted towards a round (input + output)."""
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ImageBlock:
    media_type: str
    data: str  # base64


@dataclass(frozen=True)
class ToolUseBlock:
    id: str | None
    name: str | None
    input: Any = None


@dataclass(frozen=True)
class ToolResultBlock:
    tool_use_id: str | None
    content: Any = None  # str or list of raw blocks
    is_error: bool = False


ContentBlock = TextBlock | ImageBlock | ToolUseBlock | ToolResultBlock


@dataclass(frozen=True)
class Message:
    """A single decoded conversational event."""

    role: str  # user, assistant
    content: tuple[ContentBlock, ...]
    timestamp: int  # Unix timestamp (milliseconds), 0 when unknown
    sub_type: str | None = None
    usage: Usage | None = None
    cost_usd: float | None = None
    model: str | None = None
    uuid: str | None = None

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(b.text for b in self.content if isinstance(b, TextBlock) and b.text)

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    @property
    def tool_results(self) -> list[ToolResultBlock]:
        return [b for b in self.content if isinstance(b, ToolResultBlock)]

    @property
    def images(self) -> list[ImageBlock]:
        return [b for b in self.content if isinstance(b, ImageBlock)]


@dataclass
class ToolInvocation:
    """A tool call correlated with its (possibly absent) result."""

    id: str
    name: str
    input: Any
    call_timestamp: int
    sequence_index: int
    output: Any = None
    is_error: bool = False
    result_timestamp: int | None = None
    duration_ms: int | None = None
    is_resolved: bool = False
    # A later call reused this id before a result arrived
    superseded: bool = False

    @property
    def is_pending(self) -> bool:
        """Still waiting for a result; at most one per id at a time."""
        return not self.is_resolved and not self.superseded

    @property
    def succeeded(self) -> bool:
        return self.is_resolved and not self.is_error


@dataclass
class Round:
    """One real user prompt plus everything that follows until the next one."""

    index: int
    user_message: Message
    assistant_messages: list[Message]
    tokens: int = 0
    cost: float = 0.0
    tool_call_count: int = 0
    timestamp: int = 0

    @property
    def messages(self) -> list[Message]:
        """The round's messages in input order."""
        return [self.user_message, *self.assistant_messages]


@dataclass(frozen=True)
class ExtractedImage:
    """An inline image numbered in first-encounter order within a round."""

    number: int  # 1-indexed
    media_type: str
    data: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


@dataclass(frozen=True)
class ImageReference:
    """An ``[Image #N]`` marker found in text and what it points at."""

    number: int
    start: int
    end: int
    image: ExtractedImage | None

    @property
    def matched(self) -> bool:
        return self.image is not None


@dataclass
class Session:
    """Reconstructed view of one conversation log."""

    project: str
    session_id: str
    messages: list[Message]
    rounds: list[Round] = field(default_factory=list)
    invocations: list[ToolInvocation] = field(default_factory=list)
    preamble: list[Message] = field(default_factory=list)  # messages before the first real prompt

    @property
    def id(self) -> str:
        """Stable unique ID for this session."""
        return f"{self.project}:{self.session_id}"
