#!/usr/bin/env python3
"""
hookkit - Hook Responses

The normalized Decision a hook reaches, and the encoder that turns it into
the exit code / stdout / stderr triple the host reads.

Usage:
    from hookkit.responses import Decision, encode_response
    from hookkit.events import EventKind

    decision = Decision.block("Dangerous command")
    encoded = encode_response(decision, EventKind.PRE_TOOL_USE)
    # encoded.exit_code == 0, encoded.stdout == '{"decision": "block", ...}'

Structured JSON output keys (camelCase on the wire):
    decision        "approve" | "block"   (not legal for Notification)
    reason          text for the decision (not legal for Notification)
    continue        false ends the session after this hook
    stopReason      shown to the user when continue is false
    suppressOutput  hide stdout from transcript mode
"""

import json
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from .errors import InvalidDecisionForEventKind
from .events import EventKind


class OutputPath(Enum):
    """Which output interface a hook used."""
    STRUCTURED_JSON = "structured_json"
    PLAIN_TEXT = "plain_text"


class Control(Enum):
    """What the hook asks the host to do with the operation."""
    APPROVE = "approve"
    BLOCK = "block"
    PASSTHROUGH = "passthrough"


# Exit codes with protocol meaning. Every other code is a non-blocking warning.
EXIT_SUCCESS = 0
EXIT_BLOCK = 2
EXIT_WARNING = 1

# Structured output keys each kind may carry
_COMMON_KEYS = ("continue", "stopReason", "suppressOutput")
_DECISION_KEYS = ("decision", "reason")

LEGAL_OUTPUT_KEYS = {
    EventKind.PRE_TOOL_USE: _DECISION_KEYS + _COMMON_KEYS,
    EventKind.POST_TOOL_USE: _DECISION_KEYS + _COMMON_KEYS,
    EventKind.NOTIFICATION: _COMMON_KEYS,
    EventKind.STOP: _DECISION_KEYS + _COMMON_KEYS,
    EventKind.SUBAGENT_STOP: _DECISION_KEYS + _COMMON_KEYS,
}

# Controls each kind may express. Passthrough is always legal.
LEGAL_CONTROLS = {
    EventKind.PRE_TOOL_USE: (Control.APPROVE, Control.BLOCK, Control.PASSTHROUGH),
    EventKind.POST_TOOL_USE: (Control.BLOCK, Control.PASSTHROUGH),
    EventKind.NOTIFICATION: (Control.PASSTHROUGH,),
    EventKind.STOP: (Control.BLOCK, Control.PASSTHROUGH),
    EventKind.SUBAGENT_STOP: (Control.BLOCK, Control.PASSTHROUGH),
}


@dataclass(frozen=True)
class Decision:
    """
    Normalized outcome of a hook, independent of event kind.

    On Pre/PostToolUse, BLOCK stops (or reports on) the tool call. On
    Stop/SubagentStop, BLOCK keeps the agent working with `message` as
    guidance. continue_session=False ends the session regardless of control.
    warning marks a non-blocking error exit whose message is shown to the user.
    """
    path: OutputPath = OutputPath.STRUCTURED_JSON
    control: Control = Control.PASSTHROUGH
    message: Optional[str] = None
    continue_session: bool = True
    stop_reason: Optional[str] = None
    suppress_output: bool = False
    warning: bool = False

    # --- Constructors ---

    @classmethod
    def approve(cls, reason: str) -> "Decision":
        """Approve a tool call, bypassing the permission prompt. Reason is shown to the user."""
        return cls(control=Control.APPROVE, message=reason)

    @classmethod
    def block(cls, reason: str) -> "Decision":
        """Block via structured JSON. Reason is fed back to the agent."""
        return cls(control=Control.BLOCK, message=reason)

    @classmethod
    def passthrough(cls) -> "Decision":
        """Defer to the host's normal flow."""
        return cls()

    @classmethod
    def exit_block(cls, message: str) -> "Decision":
        """Block via exit code 2 with message on stderr."""
        return cls(path=OutputPath.PLAIN_TEXT, control=Control.BLOCK, message=message)

    @classmethod
    def warn(cls, message: str) -> "Decision":
        """Non-blocking error exit. Message goes to the user, not the agent."""
        return cls(path=OutputPath.PLAIN_TEXT, message=message, warning=True)

    # --- Modifiers ---

    def and_stop(self, reason: str) -> "Decision":
        """End the session after this hook, showing reason to the user."""
        return replace(self, continue_session=False, stop_reason=reason)

    def and_suppress_output(self, suppress: bool = True) -> "Decision":
        return replace(self, suppress_output=suppress)

    @property
    def ends_session(self) -> bool:
        return not self.continue_session


@dataclass(frozen=True)
class EncodedResponse:
    """What a hook process emits: its exit code and the bytes for each stream."""
    exit_code: int
    stdout: str = ""
    stderr: str = ""


def _check_legal(decision: Decision, kind: EventKind) -> None:
    if decision.control not in LEGAL_CONTROLS[kind]:
        raise InvalidDecisionForEventKind(
            f"{decision.control.value} is not a valid decision for {kind.value}",
            kind=kind,
            control=decision.control,
        )

    if kind.is_stop_event and decision.control is Control.BLOCK and not decision.message:
        raise InvalidDecisionForEventKind(
            f"block on {kind.value} requires a reason telling the agent how to continue",
            kind=kind,
            control=decision.control,
        )

    if decision.path is not OutputPath.PLAIN_TEXT:
        return

    # Exit codes cannot carry approval or session control
    if decision.control is Control.APPROVE:
        raise InvalidDecisionForEventKind(
            "approve can only be sent as structured JSON output",
            kind=kind,
            control=decision.control,
        )
    if not decision.continue_session or decision.stop_reason is not None or decision.suppress_output:
        raise InvalidDecisionForEventKind(
            "continue, stopReason and suppressOutput can only be sent as structured JSON output",
            kind=kind,
            control=decision.control,
        )


def build_output(decision: Decision, kind: EventKind) -> Dict[str, Any]:
    """
    Build the structured JSON object for a decision.

    Only keys legal for `kind` are emitted, and defaults are left out, so
    a passthrough decision builds an empty object.
    """
    _check_legal(decision, kind)

    legal = LEGAL_OUTPUT_KEYS[kind]
    output: Dict[str, Any] = {}

    if "decision" in legal and decision.control is not Control.PASSTHROUGH:
        output["decision"] = decision.control.value
    if "reason" in legal and decision.message is not None:
        output["reason"] = decision.message
    if not decision.continue_session:
        output["continue"] = False
    if decision.stop_reason is not None:
        output["stopReason"] = decision.stop_reason
    if decision.suppress_output:
        output["suppressOutput"] = True

    return output


def encode_response(decision: Decision, kind: EventKind) -> EncodedResponse:
    """
    Encode a decision as the (exit code, stdout, stderr) a hook should emit.

    Raises:
        InvalidDecisionForEventKind: the decision cannot be expressed for
            `kind`. Raised before anything is produced.
    """
    if decision.path is OutputPath.STRUCTURED_JSON:
        return EncodedResponse(EXIT_SUCCESS, stdout=json.dumps(build_output(decision, kind)))

    _check_legal(decision, kind)

    if decision.control is Control.BLOCK:
        return EncodedResponse(EXIT_BLOCK, stderr=decision.message or "")
    if decision.warning:
        return EncodedResponse(EXIT_WARNING, stderr=decision.message or "")
    return EncodedResponse(EXIT_SUCCESS, stdout=decision.message or "")
