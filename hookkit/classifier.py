#!/usr/bin/env python3
"""
hookkit - Output Classifier

Turns what a hook process emitted (exit code, stdout, stderr) into one
Decision. Hook libraries and the test harness both go through classify(),
so a real run and a simulated one always agree.

Rules, in order:
    1. Exit code picks the path. Only exit 0 may be structured JSON, and
       only when the whole of stdout is exactly one JSON object. Anything
       else is plain text, and stdout is never read for control.
    2. Exit 2 blocks (tool events) or keeps the agent working (stop
       events), with stderr as the message. Notification ignores it.
    3. Any other non-zero code is a non-blocking warning showing stderr
       to the user.
"""

import json
from typing import Any, Dict, Optional, Tuple, Union

from .errors import json_type_name
from .events import EventKind
from .responses import (
    EXIT_BLOCK,
    EXIT_SUCCESS,
    LEGAL_OUTPUT_KEYS,
    Control,
    Decision,
    OutputPath,
)


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are accepted by the json module but are not JSON
    raise ValueError(f"invalid JSON constant: {name}")


def _to_text(data: Union[bytes, str, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _parse_object(stdout: Union[bytes, str, None]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    if stdout is None:
        return None, "no output"
    if isinstance(stdout, bytes):
        try:
            stdout = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            return None, f"output is not valid UTF-8: {e}"

    try:
        # json.loads rejects trailing non-whitespace as "Extra data"
        value = json.loads(stdout, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        return None, str(e) or type(e).__name__

    if not isinstance(value, dict):
        return None, f"expected a JSON object, got {json_type_name(value)}"
    return value, None


def parse_structured_output(stdout: Union[bytes, str, None]) -> Optional[Dict[str, Any]]:
    """
    Parse stdout as structured hook output.

    Returns the object only if the entire buffer is one JSON object with
    nothing but whitespace around it. Returns None otherwise: empty output,
    invalid UTF-8, a parse error, trailing data, or a non-object value.
    """
    return _parse_object(stdout)[0]


def structured_output_error(stdout: Union[bytes, str, None]) -> Optional[str]:
    """Why stdout is not structured output, or None when it is."""
    return _parse_object(stdout)[1]


def _decision_control(value: Any, kind: EventKind) -> Control:
    if value == "block":
        return Control.BLOCK
    if value == "approve" and kind is EventKind.PRE_TOOL_USE:
        return Control.APPROVE
    return Control.PASSTHROUGH


def _from_structured(output: Dict[str, Any], kind: EventKind) -> Decision:
    legal = LEGAL_OUTPUT_KEYS[kind]
    fields = {key: output[key] for key in legal if key in output}

    control = Control.PASSTHROUGH
    if "decision" in fields:
        control = _decision_control(fields["decision"], kind)

    message = None
    reason = fields.get("reason")
    if control is not Control.PASSTHROUGH and isinstance(reason, str):
        message = reason

    continue_session = fields.get("continue", True)
    if not isinstance(continue_session, bool):
        continue_session = True

    stop_reason = None
    if not continue_session and isinstance(fields.get("stopReason"), str):
        stop_reason = fields["stopReason"]

    suppress_output = fields.get("suppressOutput", False)
    if not isinstance(suppress_output, bool):
        suppress_output = False

    return Decision(
        path=OutputPath.STRUCTURED_JSON,
        control=control,
        message=message,
        continue_session=continue_session,
        stop_reason=stop_reason,
        suppress_output=suppress_output,
    )


def classify(
    exit_code: int,
    stdout: Union[bytes, str, None],
    stderr: Union[bytes, str, None],
    kind: EventKind
) -> Decision:
    """
    Classify a hook's output triple. Never raises for any output content.

    Args:
        exit_code: Process exit status
        stdout: Everything the hook wrote to stdout
        stderr: Everything the hook wrote to stderr
        kind: Event the hook was run for

    Returns:
        The Decision the host acts on
    """
    if exit_code == EXIT_SUCCESS:
        output = parse_structured_output(stdout)
        if output is None:
            return Decision(path=OutputPath.PLAIN_TEXT)
        return _from_structured(output, kind)

    message = _to_text(stderr)

    if exit_code == EXIT_BLOCK and kind is not EventKind.NOTIFICATION:
        # Stop events: blocking the stop means the agent keeps going
        return Decision(
            path=OutputPath.PLAIN_TEXT,
            control=Control.BLOCK,
            message=message,
            continue_session=True,
        )

    return Decision(
        path=OutputPath.PLAIN_TEXT,
        control=Control.PASSTHROUGH,
        message=message,
        warning=True,
    )
