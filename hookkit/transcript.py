#!/usr/bin/env python3
"""
hookkit - Transcript Parser

Parses the session transcript the host writes: JSON Lines, one object per
line, append-only. Each line is parsed on its own so a corrupt or
half-written line becomes a LineError and never costs the entries around it.

Usage:
    from hookkit.transcript import read_transcript
    result = read_transcript(hook.transcript_path)
    for entry in result.entries:
        print(entry.entry_type)
    for error in result.errors:
        print(error)

Recognized entry types (the "type" key): system, user, assistant, result,
summary. Both the session log shape (camelCase keys, content blocks) and the
streaming shape (snake_case keys, usage, result) are accepted.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from .errors import json_type_name


# =============================================================================
# Entry types
# =============================================================================

@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported for a message or a whole run."""
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    cache_creation_input_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None

    @property
    def total_tokens(self) -> int:
        return (self.input_tokens or 0) + (self.output_tokens or 0)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the assistant."""
    name: str
    input: Any = None
    id: Optional[str] = None


@dataclass(frozen=True)
class SystemEntry:
    """Session setup or system notice. By convention the first line."""
    subtype: Optional[str] = None
    model: Optional[str] = None
    tools: Optional[List[str]] = None
    cwd: Optional[str] = None
    session_id: Optional[str] = None
    content: Optional[str] = None
    timestamp: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    entry_type = "system"


@dataclass(frozen=True)
class UserEntry:
    """A user turn. Tool results are delivered to the agent as user turns."""
    message: Any = None
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = None
    session_id: Optional[str] = None
    timestamp: Optional[str] = None
    cwd: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    entry_type = "user"

    @property
    def text(self) -> Optional[str]:
        return message_text(self.message)

    @property
    def tool_result_count(self) -> int:
        return len(_content_blocks(self.message, "tool_result"))


@dataclass(frozen=True)
class AssistantEntry:
    """An assistant turn, with any thinking and tool calls pulled out of its content."""
    message: Any = None
    thinking: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    model: Optional[str] = None
    usage: Optional[TokenUsage] = None
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = None
    session_id: Optional[str] = None
    timestamp: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    entry_type = "assistant"

    @property
    def text(self) -> Optional[str]:
        return message_text(self.message)


@dataclass(frozen=True)
class ResultEntry:
    """End-of-run summary."""
    subtype: Optional[str] = None
    duration: Optional[float] = None
    tokens: Optional[TokenUsage] = None
    final_message: Optional[str] = None
    is_error: Optional[bool] = None
    session_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    entry_type = "result"


@dataclass(frozen=True)
class SummaryEntry:
    """Conversation summary written when a session is compacted or resumed."""
    summary: Optional[str] = None
    leaf_uuid: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    entry_type = "summary"


TranscriptEntry = Union[SystemEntry, UserEntry, AssistantEntry, ResultEntry, SummaryEntry]


@dataclass(frozen=True)
class LineError:
    """A transcript line that could not be parsed. Never fatal to the whole parse."""
    line_number: int
    raw_text: str
    json_error: str
    column: Optional[int] = None

    def __str__(self) -> str:
        return f"Failed to parse transcript at line {self.line_number}: {self.json_error}"


ParseOutcome = Union[TranscriptEntry, LineError]


@dataclass
class TranscriptParseResult:
    """Everything one pass over a transcript produced, in line order."""
    entries: List[TranscriptEntry] = field(default_factory=list)
    errors: List[LineError] = field(default_factory=list)
    total_lines: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


# =============================================================================
# Field extraction (lenient: wrong types read as absent)
# =============================================================================

def _str(data: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            return value
    return None


def _int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _number(data: Dict[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def _dict(data: Any, key: str) -> Dict[str, Any]:
    if isinstance(data, dict):
        value = data.get(key)
        if isinstance(value, dict):
            return value
    return {}


def _content_blocks(message: Any, block_type: str) -> List[Dict[str, Any]]:
    if not isinstance(message, dict):
        return []
    content = message.get("content")
    if not isinstance(content, list):
        return []
    return [b for b in content if isinstance(b, dict) and b.get("type") == block_type]


def message_text(message: Any) -> Optional[str]:
    """Plain text of a message: a bare string, string content, or its text blocks joined."""
    if isinstance(message, str):
        return message
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content
    texts = [b["text"] for b in _content_blocks(message, "text") if isinstance(b.get("text"), str)]
    if texts:
        return "\n".join(texts)
    return None


def _token_usage(data: Dict[str, Any]) -> Optional[TokenUsage]:
    if not data:
        return None
    return TokenUsage(
        input_tokens=_int(data, "input_tokens") if "input_tokens" in data else _int(data, "inputTokens"),
        output_tokens=_int(data, "output_tokens") if "output_tokens" in data else _int(data, "outputTokens"),
        cache_creation_input_tokens=_int(data, "cache_creation_input_tokens"),
        cache_read_input_tokens=_int(data, "cache_read_input_tokens"),
    )


def _thinking(message: Any) -> Optional[str]:
    blocks = [b["thinking"] for b in _content_blocks(message, "thinking")
              if isinstance(b.get("thinking"), str)]
    if blocks:
        return "\n".join(blocks)
    if isinstance(message, dict) and isinstance(message.get("thinking"), str):
        return message["thinking"]
    return None


def _tool_calls(message: Any) -> Optional[List[ToolCall]]:
    calls = [
        ToolCall(name=b["name"], input=b.get("input"), id=_str(b, "id"))
        for b in _content_blocks(message, "tool_use")
        if isinstance(b.get("name"), str)
    ]
    # Older transcripts list tool calls on the message itself
    legacy = message.get("toolUses") if isinstance(message, dict) else None
    if isinstance(legacy, list):
        calls.extend(
            ToolCall(name=t["toolName"], input=t.get("toolInput"))
            for t in legacy
            if isinstance(t, dict) and isinstance(t.get("toolName"), str)
        )
    return calls or None


def _build_system(data: Dict[str, Any]) -> SystemEntry:
    tools = data.get("tools")
    if not (isinstance(tools, list) and all(isinstance(t, str) for t in tools)):
        tools = None
    return SystemEntry(
        subtype=_str(data, "subtype"),
        model=_str(data, "model"),
        tools=tools,
        cwd=_str(data, "cwd", "workingDirectory"),
        session_id=_str(data, "session_id", "sessionId"),
        content=_str(data, "content"),
        timestamp=_str(data, "timestamp"),
        raw=data,
    )


def _build_user(data: Dict[str, Any]) -> UserEntry:
    return UserEntry(
        message=data.get("message"),
        uuid=_str(data, "uuid"),
        parent_uuid=_str(data, "parentUuid", "parent_uuid"),
        session_id=_str(data, "sessionId", "session_id"),
        timestamp=_str(data, "timestamp"),
        cwd=_str(data, "cwd"),
        raw=data,
    )


def _build_assistant(data: Dict[str, Any]) -> AssistantEntry:
    message = data.get("message")
    return AssistantEntry(
        message=message,
        thinking=_thinking(message),
        tool_calls=_tool_calls(message),
        model=_str(message, "model") if isinstance(message, dict) else None,
        usage=_token_usage(_dict(message, "usage")),
        uuid=_str(data, "uuid"),
        parent_uuid=_str(data, "parentUuid", "parent_uuid"),
        session_id=_str(data, "sessionId", "session_id"),
        timestamp=_str(data, "timestamp"),
        raw=data,
    )


def _build_result(data: Dict[str, Any]) -> ResultEntry:
    is_error = data.get("is_error")
    return ResultEntry(
        subtype=_str(data, "subtype", "status"),
        duration=_number(data, "duration_ms", "duration"),
        tokens=_token_usage(_dict(data, "usage") or _dict(data, "tokenUsage")),
        final_message=_str(data, "result", "finalMessage"),
        is_error=is_error if isinstance(is_error, bool) else None,
        session_id=_str(data, "session_id", "sessionId"),
        raw=data,
    )


def _build_summary(data: Dict[str, Any]) -> SummaryEntry:
    return SummaryEntry(
        summary=_str(data, "summary"),
        leaf_uuid=_str(data, "leafUuid"),
        raw=data,
    )


_BUILDERS = {
    "system": _build_system,
    "user": _build_user,
    "assistant": _build_assistant,
    "result": _build_result,
    "summary": _build_summary,
}

# =============================================================================
# Line parser and aggregator
# =============================================================================

def _decode_line(line: str, line_number: int) -> Union[Dict[str, Any], LineError]:
    """Decode one line and check its type discriminator without building an entry."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        return LineError(line_number, line, str(e), column=e.colno)
    except (ValueError, RecursionError) as e:
        return LineError(line_number, line, str(e) or type(e).__name__)

    if not isinstance(data, dict):
        return LineError(line_number, line, f"expected a JSON object, got {json_type_name(data)}")

    entry_type = data.get("type")
    if entry_type is None:
        return LineError(line_number, line, "missing 'type' field")
    if not isinstance(entry_type, str):
        return LineError(
            line_number, line, f"'type' must be a string, got {json_type_name(entry_type)}"
        )
    if entry_type not in _BUILDERS:
        return LineError(line_number, line, f"unknown entry type {entry_type!r}")

    return data


def parse_line(line: str, line_number: int) -> Optional[ParseOutcome]:
    """
    Parse one transcript line (1-based line_number).

    Returns None for a blank line, a LineError for a line that is not a
    JSON object with a known "type", and the typed entry otherwise.
    """
    if not line.strip():
        return None

    decoded = _decode_line(line, line_number)
    if isinstance(decoded, LineError):
        return decoded
    return _BUILDERS[decoded["type"]](decoded)


def split_lines(content: str) -> List[str]:
    """
    Split transcript content on newlines only.

    str.splitlines() would also break on U+2028 and friends, which may
    appear unescaped inside JSON strings.
    """
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _as_lines(lines: Union[str, Iterable[str]]) -> Iterable[str]:
    if isinstance(lines, str):
        return split_lines(lines)
    return lines


def iter_outcomes(lines: Union[str, Iterable[str]]) -> Iterator[ParseOutcome]:
    """Lazily parse lines in order, yielding an entry or LineError per non-blank line."""
    for line_number, line in enumerate(_as_lines(lines), start=1):
        outcome = parse_line(line.rstrip("\r\n"), line_number)
        if outcome is not None:
            yield outcome


def parse_transcript(lines: Union[str, Iterable[str]]) -> TranscriptParseResult:
    """Parse every line, collecting entries and errors side by side."""
    result = TranscriptParseResult()
    for line_number, line in enumerate(_as_lines(lines), start=1):
        result.total_lines = line_number
        outcome = parse_line(line.rstrip("\r\n"), line_number)
        if outcome is None:
            continue
        if isinstance(outcome, LineError):
            result.errors.append(outcome)
        else:
            result.entries.append(outcome)
    return result


def iter_line_errors(lines: Union[str, Iterable[str]]) -> Iterator[LineError]:
    """Lazily yield only the bad lines. Entries are checked but never built."""
    for line_number, line in enumerate(_as_lines(lines), start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        decoded = _decode_line(line, line_number)
        if isinstance(decoded, LineError):
            yield decoded


def verify_transcript(lines: Union[str, Iterable[str]]) -> bool:
    """True if every non-blank line parses. Stops at the first bad line and builds no entries."""
    return next(iter_line_errors(lines), None) is None


def _read_lines(path: Union[str, Path]) -> List[str]:
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return split_lines(f.read())


def read_transcript(path: Union[str, Path]) -> TranscriptParseResult:
    """
    Parse the transcript file at path as a snapshot.

    Undecodable bytes are replaced rather than failing the read, so a
    damaged region only affects the lines it touches.

    Raises:
        OSError: the file cannot be opened
    """
    return parse_transcript(_read_lines(path))


def read_line_errors(path: Union[str, Path]) -> List[LineError]:
    """
    Check the transcript file at path, returning its bad lines without
    building any entries.

    Raises:
        OSError: the file cannot be opened
    """
    return list(iter_line_errors(_read_lines(path)))
