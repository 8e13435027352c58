#!/usr/bin/env python3
"""
Unit tests for hookkit/events.py

Tests event kinds and decoding of the per-kind hook input records.
"""

import json
import sys
import pytest

sys.path.insert(0, '.')
from hookkit.errors import HookError, MalformedInput
from hookkit.events import (
    EventKind,
    NotificationInput,
    PostToolUseInput,
    PreToolUseInput,
    StopInput,
    SubagentStopInput,
    decode_input,
    json_type_name,
)


def pretool_payload(**overrides):
    data = {
        "session_id": "abc123",
        "transcript_path": "/tmp/t.jsonl",
        "hook_event_name": "PreToolUse",
        "tool_name": "Bash",
        "tool_input": {"command": "ls -la"},
    }
    data.update(overrides)
    return json.dumps(data)


class TestEventKind:
    """Tests for EventKind helpers."""

    def test_cli_names_round_trip(self):
        for kind in EventKind:
            assert EventKind.from_cli_name(kind.cli_name) is kind

    def test_unknown_cli_name(self):
        with pytest.raises(ValueError) as exc:
            EventKind.from_cli_name("bogus")
        assert "pretool" in str(exc.value)

    def test_wire_names(self):
        assert EventKind.PRE_TOOL_USE.value == "PreToolUse"
        assert EventKind.SUBAGENT_STOP.value == "SubagentStop"

    def test_event_groups(self):
        assert EventKind.POST_TOOL_USE.is_tool_event
        assert not EventKind.NOTIFICATION.is_tool_event
        assert EventKind.SUBAGENT_STOP.is_stop_event
        assert not EventKind.PRE_TOOL_USE.is_stop_event

    def test_input_class(self):
        assert EventKind.STOP.input_class is StopInput
        assert EventKind.NOTIFICATION.input_class is NotificationInput


class TestJsonTypeName:
    """Tests for json_type_name."""

    def test_names(self):
        assert json_type_name(None) == "null"
        assert json_type_name(True) == "boolean"
        assert json_type_name(3) == "number"
        assert json_type_name(1.5) == "number"
        assert json_type_name("x") == "string"
        assert json_type_name([]) == "array"
        assert json_type_name({}) == "object"


class TestDecodePreToolUse:
    """Tests for decoding PreToolUse input."""

    def test_valid_input(self):
        hook = decode_input(pretool_payload(), EventKind.PRE_TOOL_USE)
        assert isinstance(hook, PreToolUseInput)
        assert hook.session_id == "abc123"
        assert hook.tool_name == "Bash"
        assert hook.tool_input == {"command": "ls -la"}
        assert hook.hook_event_name == "PreToolUse"

    def test_accepts_bytes(self):
        hook = decode_input(pretool_payload().encode("utf-8"), EventKind.PRE_TOOL_USE)
        assert hook.tool_name == "Bash"

    def test_unknown_fields_ignored_but_kept_raw(self):
        hook = decode_input(pretool_payload(extra_field=42), EventKind.PRE_TOOL_USE)
        assert hook.raw_data["extra_field"] == 42

    def test_tool_input_preserves_nested_values(self):
        tool_input = {"args": ["a", "b"], "opts": {"n": 1, "flag": None}}
        hook = decode_input(pretool_payload(tool_input=tool_input), EventKind.PRE_TOOL_USE)
        assert hook.tool_input == tool_input

    def test_missing_required_field(self):
        data = json.loads(pretool_payload())
        del data["tool_name"]
        with pytest.raises(MalformedInput) as exc:
            decode_input(json.dumps(data), EventKind.PRE_TOOL_USE)
        assert exc.value.field == "tool_name"
        assert exc.value.expected == "string"

    def test_wrong_field_type(self):
        with pytest.raises(MalformedInput) as exc:
            decode_input(pretool_payload(tool_input="ls"), EventKind.PRE_TOOL_USE)
        assert exc.value.field == "tool_input"
        assert "object" in str(exc.value)
        assert "string" in str(exc.value)

    def test_optional_null_is_omitted(self):
        hook = decode_input(pretool_payload(cwd=None), EventKind.PRE_TOOL_USE)
        assert hook.cwd is None

    def test_not_json(self):
        with pytest.raises(MalformedInput):
            decode_input("not json", EventKind.PRE_TOOL_USE)

    def test_not_utf8(self):
        with pytest.raises(MalformedInput):
            decode_input(b"\xff\xfe{}", EventKind.PRE_TOOL_USE)

    def test_not_an_object(self):
        with pytest.raises(MalformedInput) as exc:
            decode_input("[1, 2]", EventKind.PRE_TOOL_USE)
        assert "array" in str(exc.value)

    def test_oversized_integer(self):
        payload = '{"n": ' + "1" * 5000 + "}"
        with pytest.raises(MalformedInput):
            decode_input(payload, EventKind.PRE_TOOL_USE)

    def test_runaway_nesting(self):
        with pytest.raises(MalformedInput):
            decode_input("[" * 100000, EventKind.PRE_TOOL_USE)

    def test_event_name_for_another_kind(self):
        with pytest.raises(MalformedInput) as exc:
            decode_input(pretool_payload(hook_event_name="Stop"), EventKind.PRE_TOOL_USE)
        assert exc.value.field == "hook_event_name"
        assert "PreToolUse" in exc.value.expected

    def test_malformed_input_is_hook_error_and_value_error(self):
        with pytest.raises(HookError):
            decode_input("{}", EventKind.PRE_TOOL_USE)
        with pytest.raises(ValueError):
            decode_input("{}", EventKind.PRE_TOOL_USE)


class TestDecodeOtherKinds:
    """Tests for decoding PostToolUse, Notification, Stop and SubagentStop input."""

    def test_posttool_requires_tool_response(self):
        payload = pretool_payload(hook_event_name="PostToolUse")
        with pytest.raises(MalformedInput) as exc:
            decode_input(payload, EventKind.POST_TOOL_USE)
        assert exc.value.field == "tool_response"

    def test_posttool_valid(self):
        payload = pretool_payload(hook_event_name="PostToolUse", tool_response={"output": "ok\n"})
        hook = decode_input(payload, EventKind.POST_TOOL_USE)
        assert isinstance(hook, PostToolUseInput)
        assert hook.tool_response == {"output": "ok\n"}

    def test_notification_title_optional(self):
        payload = json.dumps({
            "session_id": "s",
            "transcript_path": "/tmp/t",
            "message": "Claude needs permission",
        })
        hook = decode_input(payload, EventKind.NOTIFICATION)
        assert hook.message == "Claude needs permission"
        assert hook.title is None
        assert hook.hook_event_name == "Notification"

    def test_notification_checks_event_name(self):
        payload = json.dumps({
            "session_id": "s",
            "transcript_path": "/tmp/t",
            "message": "hi",
            "hook_event_name": "Stop",
        })
        with pytest.raises(MalformedInput) as exc:
            decode_input(payload, EventKind.NOTIFICATION)
        assert exc.value.field == "hook_event_name"

    def test_notification_requires_message(self):
        payload = json.dumps({"session_id": "s", "transcript_path": "/tmp/t"})
        with pytest.raises(MalformedInput):
            decode_input(payload, EventKind.NOTIFICATION)

    def test_stop_hook_active_defaults_false(self):
        payload = json.dumps({"session_id": "s", "transcript_path": "/tmp/t"})
        hook = decode_input(payload, EventKind.STOP)
        assert hook.stop_hook_active is False

    def test_stop_hook_active_must_be_boolean(self):
        payload = json.dumps({"session_id": "s", "transcript_path": "/tmp/t", "stop_hook_active": "yes"})
        with pytest.raises(MalformedInput) as exc:
            decode_input(payload, EventKind.STOP)
        assert exc.value.expected == "boolean"

    def test_subagent_stop(self):
        payload = json.dumps({"session_id": "s", "transcript_path": "/tmp/t", "stop_hook_active": True})
        hook = decode_input(payload, EventKind.SUBAGENT_STOP)
        assert isinstance(hook, SubagentStopInput)
        assert hook.stop_hook_active is True


class TestToDict:
    """Tests for the wire form of input records."""

    def test_omits_unset_optional_fields(self):
        hook = StopInput(session_id="s", transcript_path="/tmp/t")
        assert hook.to_dict() == {
            "session_id": "s",
            "transcript_path": "/tmp/t",
            "stop_hook_active": False,
        }

    def test_to_json_decodes_back(self):
        hook = PreToolUseInput(
            session_id="s",
            transcript_path="/tmp/t",
            tool_name="Write",
            tool_input={"file_path": "/tmp/x"},
            hook_event_name="PreToolUse",
        )
        decoded = decode_input(hook.to_json(), EventKind.PRE_TOOL_USE)
        assert decoded == hook


class TestReadTranscript:
    """Tests for HookInput.read_transcript."""

    def test_reads_transcript_path(self, tmp_path):
        transcript = tmp_path / "t.jsonl"
        transcript.write_text(
            '{"type": "user", "message": {"role": "user", "content": "hi"}}\n'
            'garbage\n'
        )
        hook = StopInput(session_id="s", transcript_path=str(transcript))
        result = hook.read_transcript()
        assert len(result.entries) == 1
        assert len(result.errors) == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
