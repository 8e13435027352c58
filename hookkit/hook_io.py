#!/usr/bin/env python3
"""
Hook I/O - Input parsing and response emission for hook processes.

Usage:
    from hookkit.hook_io import read_input, respond
    from hookkit.events import EventKind
    from hookkit.responses import Decision

    hook = read_input(EventKind.PRE_TOOL_USE)
    if "rm -rf" in hook.tool_input.get("command", ""):
        respond(Decision.block("Dangerous command"), EventKind.PRE_TOOL_USE)
    respond(Decision.passthrough(), EventKind.PRE_TOOL_USE)

Every emitting function here ends the process: it writes the streams and
calls sys.exit with the protocol exit code.
"""

import sys
from typing import BinaryIO, Callable, NoReturn, Optional

from .errors import HookError
from .events import EventKind, HookInput, decode_input
from .logger import HookLogger
from .responses import EXIT_BLOCK, EXIT_SUCCESS, EXIT_WARNING, Decision, encode_response


def read_input(kind: EventKind, stream: Optional[BinaryIO] = None) -> HookInput:
    """
    Read all of stdin and decode it as the input record for `kind`.

    Raises:
        MalformedInput: stdin is not a valid input record for `kind`
    """
    if stream is None:
        stream = sys.stdin.buffer
    return decode_input(stream.read(), kind)


def _emit(exit_code: int, stdout: str = "", stderr: str = "") -> NoReturn:
    if stdout:
        sys.stdout.write(stdout)
        sys.stdout.flush()
    if stderr:
        sys.stderr.write(stderr)
        sys.stderr.flush()
    sys.exit(exit_code)


def respond(decision: Decision, kind: EventKind) -> NoReturn:
    """
    Encode `decision` for `kind`, write it out, and exit.

    The decision is validated before anything is written, so an illegal
    decision raises InvalidDecisionForEventKind with both streams untouched.
    """
    encoded = encode_response(decision, kind)
    _emit(encoded.exit_code, encoded.stdout, encoded.stderr)


def exit_success(message: Optional[str] = None) -> NoReturn:
    """Exit 0. The message goes to stdout, which the user sees in transcript mode."""
    _emit(EXIT_SUCCESS, stdout=message or "")


def exit_block(message: str) -> NoReturn:
    """Exit 2 with message on stderr, which is fed back to the agent."""
    _emit(EXIT_BLOCK, stderr=message)


def exit_error(code: int, message: str) -> NoReturn:
    """Non-blocking error exit. Message on stderr is shown to the user."""
    if code in (EXIT_SUCCESS, EXIT_BLOCK):
        raise ValueError(f"exit code {code} has protocol meaning; use exit_success or exit_block")
    _emit(code, stderr=message)


def run_hook(kind: EventKind, handler: Callable[[HookInput], Decision]) -> NoReturn:
    """
    Run a complete hook: read stdin, call handler, respond.

    Malformed input is logged and reported on stderr as a non-blocking
    error, so a broken payload never blocks the agent.
    """
    try:
        hook = read_input(kind)
    except HookError as e:
        HookLogger().log_hook(kind.value, f"malformed input: {e}")
        exit_error(EXIT_WARNING, f"hook input error: {e}")
    respond(handler(hook), kind)
