#!/usr/bin/env python3
"""
hookkit - Output Formatters

Pure functions that turn decisions and transcript entries into text.
These are easily unit-testable without a console.
"""

import json
from typing import List, NamedTuple, Optional

from .events import EventKind
from .responses import Control, Decision, OutputPath
from .transcript import (
    AssistantEntry,
    ResultEntry,
    SummaryEntry,
    SystemEntry,
    TranscriptEntry,
    UserEntry,
)

PREVIEW_CHARS = 50


def truncate_preview(text: str, max_chars: int = PREVIEW_CHARS) -> str:
    """First max_chars characters, with "..." when anything was cut."""
    if len(text) > max_chars:
        return text[:max_chars] + "..."
    return text


# =============================================================================
# Decision summary ("what Claude/user would see")
# =============================================================================

class Line(NamedTuple):
    """
    One line of a decision summary.

    style is one of: approve, block, label, dim, alert.
    For label lines, text is the label and value what follows it.
    """
    style: str
    text: str
    value: Optional[str] = None


_PASSTHROUGH_NOTES = {
    EventKind.PRE_TOOL_USE: "Decision: NONE (follows normal permission flow)",
    EventKind.POST_TOOL_USE: "Decision: NONE (tool output passed through)",
    EventKind.STOP: "Decision: NONE (Claude stops normally)",
    EventKind.SUBAGENT_STOP: "Decision: NONE (subagent stops normally)",
    EventKind.NOTIFICATION: "Claude continues normally",
}


def _block_lines(decision: Decision, kind: EventKind) -> List[Line]:
    lines = [Line("block", "BLOCK")]
    message = decision.message or ""
    if kind.is_stop_event:
        lines.append(Line("label", "Claude continues with", message))
    elif kind is EventKind.POST_TOOL_USE:
        lines.append(Line("label", "User sees", "Tool succeeded, but hook provided feedback"))
        lines.append(Line("label", "Claude sees", message))
    else:
        lines.append(Line("label", "User sees", "Tool blocked by hook"))
        lines.append(Line("label", "Claude sees", message))
    return lines


def decision_summary(decision: Decision, kind: EventKind) -> List[Line]:
    """Describe what the host, the user and the agent would see for a decision."""
    lines: List[Line] = []

    if decision.warning:
        lines.append(Line("alert", "Non-blocking error"))
        if decision.message:
            lines.append(Line("label", "User sees", decision.message.rstrip()))
        lines.append(Line("dim", "Claude sees: (nothing, execution continues)"))
        return lines

    if decision.control is Control.APPROVE:
        lines.append(Line("approve", "APPROVE"))
        if decision.message:
            lines.append(Line("label", "User sees", decision.message))
        lines.append(Line("dim", "Claude sees: (nothing, tool proceeds)"))
    elif decision.control is Control.BLOCK:
        lines.extend(_block_lines(decision, kind))
    else:
        lines.append(Line("dim", _PASSTHROUGH_NOTES[kind]))
        if decision.path is OutputPath.PLAIN_TEXT and decision.message:
            lines.append(Line("label", "Shown in transcript mode", decision.message.rstrip()))

    if decision.ends_session:
        lines.append(Line("alert", "Claude would STOP processing"))
        if decision.stop_reason is not None:
            lines.append(Line("label", "Stop reason shown to user", decision.stop_reason))

    if decision.suppress_output:
        lines.append(Line("dim", "Output would be hidden in transcript mode"))

    return lines


def output_path_label(decision: Decision) -> str:
    if decision.path is OutputPath.STRUCTURED_JSON:
        return "structured JSON"
    return "exit code"


# =============================================================================
# Transcript formatters
# =============================================================================

def describe_entry(entry: TranscriptEntry) -> str:
    """One-line description of a transcript entry."""
    if isinstance(entry, SystemEntry):
        return f"System: {entry.subtype or 'init'}"

    if isinstance(entry, UserEntry):
        text = entry.text
        if text is None:
            if entry.tool_result_count:
                return f"User: {entry.tool_result_count} tool results"
            return "User: No content"
        return f"User: {truncate_preview(text)}"

    if isinstance(entry, AssistantEntry):
        parts = ["Assistant"]
        if entry.thinking is not None:
            parts.append("with thinking")
        if entry.tool_calls:
            parts.append(f"{len(entry.tool_calls)} tool calls")
        return ": ".join(parts)

    if isinstance(entry, ResultEntry):
        return f"Result: {entry.subtype or 'unknown'}"

    if isinstance(entry, SummaryEntry):
        if entry.summary:
            return f"Summary: {truncate_preview(entry.summary)}"
        return "Summary"

    return type(entry).__name__


def entry_json(entry: TranscriptEntry) -> str:
    """Pretty JSON of the entry as it appeared in the transcript."""
    return json.dumps(entry.raw, indent=2, ensure_ascii=False)


def format_json_line_for_debug(line: str) -> str:
    """Pretty-print a line if it is valid JSON, otherwise return it unchanged."""
    try:
        value = json.loads(line)
    except (ValueError, RecursionError):
        return line
    return json.dumps(value, indent=2, ensure_ascii=False)


def error_pointer(column: Optional[int]) -> Optional[str]:
    """A caret under the 1-based column, or None when the column is unknown."""
    if not column or column < 1:
        return None
    return " " * (column - 1) + "^"
