#!/usr/bin/env python3
"""
hookkit - Hook Events

Event kinds and the input records a hook receives on stdin.

Usage:
    from hookkit.events import EventKind, decode_input
    hook = decode_input(sys.stdin.buffer.read(), EventKind.PRE_TOOL_USE)
    print(hook.tool_name, hook.tool_input)

Decoding is strict about the fields each kind requires and lenient about
everything else: unknown keys are ignored, optional keys may be absent or
null, but a present field of the wrong JSON type is an error.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from .errors import MalformedInput, json_type_name
from .transcript import TranscriptParseResult, read_transcript


class EventKind(Enum):
    """Lifecycle points at which the host agent runs hooks."""
    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    NOTIFICATION = "Notification"
    STOP = "Stop"
    SUBAGENT_STOP = "SubagentStop"

    @property
    def cli_name(self) -> str:
        """Short lowercase name used on the command line (e.g. "pretool")."""
        return _CLI_NAMES[self]

    @classmethod
    def from_cli_name(cls, name: str) -> "EventKind":
        for kind, cli_name in _CLI_NAMES.items():
            if cli_name == name:
                return kind
        raise ValueError(
            f"Unknown event type: {name}. "
            f"Must be one of: {', '.join(_CLI_NAMES.values())}"
        )

    @property
    def input_class(self) -> type:
        return _INPUT_CLASSES[self]

    @property
    def is_tool_event(self) -> bool:
        return self in (EventKind.PRE_TOOL_USE, EventKind.POST_TOOL_USE)

    @property
    def is_stop_event(self) -> bool:
        return self in (EventKind.STOP, EventKind.SUBAGENT_STOP)


_CLI_NAMES = {
    EventKind.PRE_TOOL_USE: "pretool",
    EventKind.POST_TOOL_USE: "posttool",
    EventKind.NOTIFICATION: "notification",
    EventKind.STOP: "stop",
    EventKind.SUBAGENT_STOP: "subagentstop",
}

_JSON_TYPES = {
    "string": str,
    "object": dict,
    "boolean": bool,
}


class _InputRecord:
    """
    Shared decoding for the per-kind input records.

    Each record lists its wire fields in _SCHEMA as (name, json type, required).
    """

    KIND: ClassVar[EventKind]
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "HookInput":
        """Build the record from decoded JSON, raising MalformedInput on bad fields."""
        if not isinstance(data, dict):
            raise MalformedInput(
                f"{cls.KIND.value} input must be a JSON object, got {json_type_name(data)}"
            )

        values: Dict[str, Any] = {}
        for name, expected, required in cls._SCHEMA:
            if name not in data or (data[name] is None and not required):
                if required:
                    raise MalformedInput(
                        f"{cls.KIND.value} input is missing required field '{name}' ({expected})",
                        field=name,
                        expected=expected,
                    )
                continue

            value = data[name]
            if not isinstance(value, _JSON_TYPES[expected]):
                raise MalformedInput(
                    f"{cls.KIND.value} field '{name}' must be {expected}, "
                    f"got {json_type_name(value)}",
                    field=name,
                    expected=expected,
                )
            values[name] = value

        event_name = values.get("hook_event_name")
        if event_name is not None and event_name != cls.KIND.value:
            raise MalformedInput(
                f"{cls.KIND.value} input has hook_event_name {event_name!r}",
                field="hook_event_name",
                expected=f'"{cls.KIND.value}"',
            )

        return cls(raw_data=data, **values)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form of the record, omitting optional fields that are unset."""
        data: Dict[str, Any] = {}
        for name, _expected, required in self._SCHEMA:
            value = getattr(self, name)
            if required or value is not None:
                data[name] = value
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def read_transcript(self) -> TranscriptParseResult:
        """Parse the transcript file this event points at."""
        return read_transcript(self.transcript_path)


@dataclass(frozen=True)
class PreToolUseInput(_InputRecord):
    """Input for hooks that run after the agent builds tool arguments, before the tool runs."""
    session_id: str
    transcript_path: str
    tool_name: str
    tool_input: Dict[str, Any]
    hook_event_name: Optional[str] = None
    cwd: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    KIND: ClassVar[EventKind] = EventKind.PRE_TOOL_USE
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = (
        ("session_id", "string", True),
        ("transcript_path", "string", True),
        ("hook_event_name", "string", False),
        ("cwd", "string", False),
        ("tool_name", "string", True),
        ("tool_input", "object", True),
    )


@dataclass(frozen=True)
class PostToolUseInput(_InputRecord):
    """Input for hooks that run after a tool completed. The tool has already run."""
    session_id: str
    transcript_path: str
    tool_name: str
    tool_input: Dict[str, Any]
    tool_response: Dict[str, Any]
    hook_event_name: Optional[str] = None
    cwd: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    KIND: ClassVar[EventKind] = EventKind.POST_TOOL_USE
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = (
        ("session_id", "string", True),
        ("transcript_path", "string", True),
        ("hook_event_name", "string", False),
        ("cwd", "string", False),
        ("tool_name", "string", True),
        ("tool_input", "object", True),
        ("tool_response", "object", True),
    )


@dataclass(frozen=True)
class NotificationInput(_InputRecord):
    """
    Input for hooks that run when the agent sends a notification.

    `title` is documented upstream but not emitted in practice, so it is
    optional, as is `hook_event_name`. When present, `hook_event_name`
    must be "Notification", like every kind's own event name.
    """
    session_id: str
    transcript_path: str
    message: str
    hook_event_name: Optional[str] = EventKind.NOTIFICATION.value
    title: Optional[str] = None
    cwd: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    KIND: ClassVar[EventKind] = EventKind.NOTIFICATION
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = (
        ("session_id", "string", True),
        ("transcript_path", "string", True),
        ("hook_event_name", "string", False),
        ("cwd", "string", False),
        ("message", "string", True),
        ("title", "string", False),
    )


@dataclass(frozen=True)
class StopInput(_InputRecord):
    """
    Input for hooks that run when the agent finishes responding.

    stop_hook_active is true when the agent is already continuing because a
    stop hook blocked it; check it to avoid looping forever.
    """
    session_id: str
    transcript_path: str
    stop_hook_active: bool = False
    hook_event_name: Optional[str] = None
    cwd: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    KIND: ClassVar[EventKind] = EventKind.STOP
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = (
        ("session_id", "string", True),
        ("transcript_path", "string", True),
        ("hook_event_name", "string", False),
        ("cwd", "string", False),
        ("stop_hook_active", "boolean", False),
    )


@dataclass(frozen=True)
class SubagentStopInput(_InputRecord):
    """Same as StopInput, sent when a subagent finishes."""
    session_id: str
    transcript_path: str
    stop_hook_active: bool = False
    hook_event_name: Optional[str] = None
    cwd: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    KIND: ClassVar[EventKind] = EventKind.SUBAGENT_STOP
    _SCHEMA: ClassVar[Tuple[Tuple[str, str, bool], ...]] = (
        ("session_id", "string", True),
        ("transcript_path", "string", True),
        ("hook_event_name", "string", False),
        ("cwd", "string", False),
        ("stop_hook_active", "boolean", False),
    )


HookInput = Union[
    PreToolUseInput,
    PostToolUseInput,
    NotificationInput,
    StopInput,
    SubagentStopInput,
]

_INPUT_CLASSES = {
    EventKind.PRE_TOOL_USE: PreToolUseInput,
    EventKind.POST_TOOL_USE: PostToolUseInput,
    EventKind.NOTIFICATION: NotificationInput,
    EventKind.STOP: StopInput,
    EventKind.SUBAGENT_STOP: SubagentStopInput,
}


def decode_input(payload: Union[bytes, str], kind: EventKind) -> HookInput:
    """
    Decode a complete stdin payload into the input record for `kind`.

    Raises:
        MalformedInput: payload is not UTF-8 JSON, not an object, names
            another event in hook_event_name, or a required field is absent
            or has the wrong JSON type.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput(f"{kind.value} input is not valid UTF-8: {e}") from e

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedInput(f"{kind.value} input is not valid JSON: {e}") from e
    except (ValueError, RecursionError) as e:
        # oversized integers and runaway nesting
        raise MalformedInput(
            f"{kind.value} input could not be decoded: {str(e) or type(e).__name__}"
        ) from e

    return kind.input_class.from_dict(data)
