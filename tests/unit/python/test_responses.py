#!/usr/bin/env python3
"""
Unit tests for hookkit/responses.py

Tests Decision builders and the response encoder.
"""

import json
import sys
import pytest

sys.path.insert(0, '.')
from hookkit.errors import InvalidDecisionForEventKind
from hookkit.events import EventKind
from hookkit.responses import (
    EXIT_BLOCK,
    EXIT_SUCCESS,
    EXIT_WARNING,
    Control,
    Decision,
    OutputPath,
    build_output,
    encode_response,
)


class TestDecisionBuilders:
    """Tests for Decision constructors and modifiers."""

    def test_defaults_are_passthrough(self):
        decision = Decision.passthrough()
        assert decision.path is OutputPath.STRUCTURED_JSON
        assert decision.control is Control.PASSTHROUGH
        assert decision.continue_session is True
        assert decision.message is None

    def test_approve(self):
        decision = Decision.approve("Safe command")
        assert decision.control is Control.APPROVE
        assert decision.message == "Safe command"

    def test_exit_block_uses_plain_path(self):
        decision = Decision.exit_block("nope")
        assert decision.path is OutputPath.PLAIN_TEXT
        assert decision.control is Control.BLOCK

    def test_and_stop_returns_new_value(self):
        original = Decision.passthrough()
        stopped = original.and_stop("Done for today")
        assert original.continue_session is True
        assert stopped.continue_session is False
        assert stopped.stop_reason == "Done for today"
        assert stopped.ends_session

    def test_and_suppress_output(self):
        assert Decision.passthrough().and_suppress_output().suppress_output is True
        assert Decision.passthrough().and_suppress_output(False).suppress_output is False


class TestBuildOutput:
    """Tests for the structured output object."""

    def test_passthrough_is_empty_object(self):
        for kind in EventKind:
            assert build_output(Decision.passthrough(), kind) == {}

    def test_pretool_approve(self):
        output = build_output(Decision.approve("ok"), EventKind.PRE_TOOL_USE)
        assert output == {"decision": "approve", "reason": "ok"}

    def test_key_order(self):
        decision = Decision.block("bad").and_stop("halt").and_suppress_output()
        output = build_output(decision, EventKind.POST_TOOL_USE)
        assert list(output) == ["decision", "reason", "continue", "stopReason", "suppressOutput"]
        assert output["continue"] is False

    def test_notification_never_carries_decision_keys(self):
        decision = Decision(message="ignored").and_stop("bye")
        output = build_output(decision, EventKind.NOTIFICATION)
        assert output == {"continue": False, "stopReason": "bye"}

    def test_stop_block_with_reason(self):
        output = build_output(Decision.block("Run the tests first"), EventKind.STOP)
        assert output == {"decision": "block", "reason": "Run the tests first"}


class TestIllegalDecisions:
    """Tests for decisions that cannot be expressed for an event kind."""

    @pytest.mark.parametrize("kind", [
        EventKind.POST_TOOL_USE,
        EventKind.NOTIFICATION,
        EventKind.STOP,
        EventKind.SUBAGENT_STOP,
    ])
    def test_approve_only_on_pretool(self, kind):
        with pytest.raises(InvalidDecisionForEventKind) as exc:
            encode_response(Decision.approve("ok"), kind)
        assert exc.value.kind is kind
        assert exc.value.control is Control.APPROVE

    def test_block_on_notification(self):
        with pytest.raises(InvalidDecisionForEventKind):
            encode_response(Decision.block("no"), EventKind.NOTIFICATION)

    def test_stop_block_requires_reason(self):
        with pytest.raises(InvalidDecisionForEventKind):
            encode_response(Decision(control=Control.BLOCK), EventKind.STOP)
        with pytest.raises(InvalidDecisionForEventKind):
            encode_response(Decision(control=Control.BLOCK, message=""), EventKind.SUBAGENT_STOP)

    def test_approve_not_expressible_by_exit_code(self):
        decision = Decision(path=OutputPath.PLAIN_TEXT, control=Control.APPROVE, message="ok")
        with pytest.raises(InvalidDecisionForEventKind):
            encode_response(decision, EventKind.PRE_TOOL_USE)

    def test_session_control_not_expressible_by_exit_code(self):
        decision = Decision.exit_block("no").and_stop("halt")
        with pytest.raises(InvalidDecisionForEventKind):
            encode_response(decision, EventKind.PRE_TOOL_USE)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            encode_response(Decision.approve("ok"), EventKind.STOP)


class TestEncodeResponse:
    """Tests for the encoded exit code and streams."""

    def test_structured_block(self):
        encoded = encode_response(Decision.block("Dangerous command"), EventKind.PRE_TOOL_USE)
        assert encoded.exit_code == EXIT_SUCCESS
        assert encoded.stderr == ""
        assert json.loads(encoded.stdout) == {"decision": "block", "reason": "Dangerous command"}

    def test_passthrough_encodes_empty_object(self):
        encoded = encode_response(Decision.passthrough(), EventKind.NOTIFICATION)
        assert encoded.exit_code == 0
        assert encoded.stdout == "{}"

    def test_plain_block(self):
        encoded = encode_response(Decision.exit_block("Fix the tests"), EventKind.STOP)
        assert encoded.exit_code == EXIT_BLOCK
        assert encoded.stdout == ""
        assert encoded.stderr == "Fix the tests"

    def test_plain_warning(self):
        encoded = encode_response(Decision.warn("could not read config"), EventKind.POST_TOOL_USE)
        assert encoded.exit_code == EXIT_WARNING
        assert encoded.stderr == "could not read config"

    def test_plain_success_message_on_stdout(self):
        decision = Decision(path=OutputPath.PLAIN_TEXT, message="checked 3 files")
        encoded = encode_response(decision, EventKind.POST_TOOL_USE)
        assert encoded.exit_code == 0
        assert encoded.stdout == "checked 3 files"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
