#!/usr/bin/env python3
"""
hookkit - Test Harness

Runs a hook executable against a synthesized event and reports what the
host would conclude. The verdict always comes from classifier.classify(),
the same code hooks are judged by at runtime.

Usage:
    from hookkit.harness import build_input, execute_hook
    from hookkit.events import EventKind

    hook_input = build_input(EventKind.PRE_TOOL_USE, tool_name="Bash",
                             tool_input={"command": "ls"})
    run = execute_hook(["./my-hook"], hook_input)
    print(run.exit_code, run.decision.control)
"""

import json
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .classifier import classify, parse_structured_output, structured_output_error
from .config import DEFAULT_TOOL, DEFAULT_TRANSCRIPT_PATH
from .errors import HookTimeout
from .events import EventKind, HookInput
from .responses import Decision, OutputPath

DEFAULT_NOTIFICATION_MESSAGE = "Claude needs permission to run a command"


# =============================================================================
# Input synthesis
# =============================================================================

def generate_session_id() -> str:
    """Session id for synthesized events: test-session-<epoch millis>."""
    return f"test-session-{int(time.time() * 1000)}"


def default_tool_input(tool_name: str) -> Dict[str, Any]:
    if tool_name == "Bash":
        return {"command": "echo 'test'"}
    return {}


def default_tool_response() -> Dict[str, Any]:
    return {"output": "test\n"}


def _split_pair(item: str, value_kind: str) -> List[str]:
    parts = item.split("=", 1)
    if len(parts) != 2:
        raise ValueError(f"Invalid input format '{item}'. Expected 'key={value_kind}'")
    return parts


def parse_string_inputs(items: Iterable[str]) -> Dict[str, Any]:
    """Parse key=value items into a dict of string values."""
    result: Dict[str, Any] = {}
    for item in items:
        key, value = _split_pair(item, "value")
        result[key] = value
    return result


def parse_json_inputs(items: Iterable[str]) -> Dict[str, Any]:
    """Parse key=<json> items into a dict of decoded JSON values."""
    result: Dict[str, Any] = {}
    for item in items:
        key, raw = _split_pair(item, "json")
        try:
            result[key] = json.loads(raw)
        except ValueError as e:
            raise ValueError(f"Failed to parse JSON for key '{key}': {raw}") from e
    return result


def combine_inputs(
    base: Optional[Dict[str, Any]],
    string_items: Iterable[str] = (),
    json_items: Iterable[str] = ()
) -> Dict[str, Any]:
    """Merge input sources. JSON items override string items; both override base."""
    result = dict(base or {})
    result.update(parse_string_inputs(string_items))
    result.update(parse_json_inputs(json_items))
    return result


def build_input(
    kind: EventKind,
    session_id: Optional[str] = None,
    transcript_path: str = DEFAULT_TRANSCRIPT_PATH,
    tool_name: str = DEFAULT_TOOL,
    tool_input: Optional[Dict[str, Any]] = None,
    tool_response: Optional[Dict[str, Any]] = None,
    message: str = DEFAULT_NOTIFICATION_MESSAGE,
    title: Optional[str] = None,
    stop_hook_active: bool = False,
    cwd: Optional[str] = None
) -> HookInput:
    """
    Synthesize the input record a host would send for `kind`.

    Arguments that do not apply to `kind` are ignored. Missing tool input
    and tool response fall back to the defaults for `tool_name`.
    """
    common = {
        "session_id": session_id or generate_session_id(),
        "transcript_path": transcript_path,
        "hook_event_name": kind.value,
        "cwd": cwd,
    }

    if kind.is_tool_event:
        common["tool_name"] = tool_name
        common["tool_input"] = tool_input if tool_input is not None else default_tool_input(tool_name)
        if kind is EventKind.POST_TOOL_USE:
            common["tool_response"] = (
                tool_response if tool_response is not None else default_tool_response()
            )
    elif kind is EventKind.NOTIFICATION:
        common["message"] = message
        common["title"] = title
    else:
        common["stop_hook_active"] = stop_hook_active

    return kind.input_class(**common)


# =============================================================================
# Execution
# =============================================================================

@dataclass
class HookRun:
    """Everything observed from one hook execution, plus the host's verdict."""
    command: List[str]
    kind: EventKind
    input_payload: str
    exit_code: int
    stdout: bytes
    stderr: bytes
    decision: Decision

    @property
    def structured_output(self) -> Optional[Dict[str, Any]]:
        """The parsed JSON object, when the hook answered with structured output."""
        if self.decision.path is not OutputPath.STRUCTURED_JSON:
            return None
        return parse_structured_output(self.stdout)

    @property
    def parse_error(self) -> Optional[str]:
        """Why a successful hook's non-empty stdout was not taken as JSON, if it wasn't."""
        if self.exit_code != 0 or not self.stdout.strip():
            return None
        return structured_output_error(self.stdout)

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def execute_hook(
    hook_args: List[str],
    hook_input: HookInput,
    timeout: Optional[float] = None
) -> HookRun:
    """
    Run hook_args with hook_input as JSON on stdin and classify the result.

    Raises:
        ValueError: hook_args is empty
        OSError: the command could not be started
        HookTimeout: the hook did not exit within `timeout` seconds
    """
    if not hook_args:
        raise ValueError("No hook command provided. Use -- followed by the hook command.")

    payload = hook_input.to_json()
    try:
        result = subprocess.run(
            list(hook_args),
            input=payload.encode("utf-8"),
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise HookTimeout(
            f"hook did not exit within {timeout} seconds: {' '.join(hook_args)}",
            timeout=timeout,
        ) from e

    kind = hook_input.KIND
    return HookRun(
        command=list(hook_args),
        kind=kind,
        input_payload=payload,
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        decision=classify(result.returncode, result.stdout, result.stderr, kind),
    )
