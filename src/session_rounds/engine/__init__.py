"""Session reconstruction engine: decoding, segmentation, correlation."""

from .aggregator import (
    RoundStats,
    SessionStats,
    ToolStats,
    ToolUsage,
    UsageTotals,
    extract_images,
    find_image_references,
    resolve_image,
    round_stats,
    session_stats,
    tool_stats,
    tool_usage,
)
from .classifier import INTERNAL_SUB_TYPES, is_real_user_prompt
from .correlator import ToolCorrelator, compute_duration, correlate
from .decoder import (
    MalformedInputError,
    decode_block,
    decode_message,
    decode_messages,
    normalize_timestamp,
)
from .segmenter import Segmentation, segment, segment_rounds

__all__ = [
    "INTERNAL_SUB_TYPES",
    "MalformedInputError",
    "RoundStats",
    "Segmentation",
    "SessionStats",
    "ToolCorrelator",
    "ToolStats",
    "ToolUsage",
    "UsageTotals",
    "compute_duration",
    "correlate",
    "decode_block",
    "decode_message",
    "decode_messages",
    "extract_images",
    "find_image_references",
    "is_real_user_prompt",
    "normalize_timestamp",
    "resolve_image",
    "round_stats",
    "segment",
    "segment_rounds",
    "session_stats",
    "tool_stats",
    "tool_usage",
]
