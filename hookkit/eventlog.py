#!/usr/bin/env python3
"""
hookkit - Event Log Hook

A ready-made hook that records every event it receives. Install it for any
event kind to capture real host payloads:

    hookkit log pretool /tmp/events.jsonl --transcript /tmp/parsed.jsonl

Each event is appended to the log file as one JSON line:
    {"event": "pretool", "timestamp": <unix seconds>, "data": {...input...}}

The hook always answers with the passthrough response for its kind.
"""

import json
import time
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .events import EventKind, HookInput
from .hook_io import read_input, respond
from .logger import HookLogger
from .responses import Decision
from .transcript import TranscriptParseResult


def log_event(kind: EventKind, hook_input: HookInput, file_path: Union[str, Path]) -> None:
    """Append one {"event", "timestamp", "data"} line to file_path."""
    record = {
        "event": kind.cli_name,
        "timestamp": int(time.time()),
        "data": hook_input.raw_data or hook_input.to_dict(),
    }
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record) + "\n")


def rewrite_transcript(hook_input: HookInput, output_path: Union[str, Path]) -> TranscriptParseResult:
    """
    Parse the event's transcript and rewrite output_path with one line per
    entry that parsed. Lines that failed to parse are dropped.

    Returns the parse result, so callers can see what was dropped.
    """
    result = hook_input.read_transcript()
    with open(output_path, "w", encoding="utf-8") as f:
        for entry in result.entries:
            f.write(json.dumps(entry.raw) + "\n")
    return result


def run_log_hook(
    kind: EventKind,
    file_path: str,
    transcript_output: Optional[str] = None,
    stream: Optional[BinaryIO] = None
) -> None:
    """Read the event from stdin, record it, and respond with passthrough. Exits the process."""
    hook_input = read_input(kind, stream)
    logger = HookLogger(hook_input.session_id)
    logger.log_hook(kind.value, "received")

    log_event(kind, hook_input, file_path)
    logger.log_recorded(kind.cli_name, file_path)

    if transcript_output:
        result = rewrite_transcript(hook_input, transcript_output)
        logger.log_transcript(hook_input.transcript_path, len(result.entries), len(result.errors))

    respond(Decision.passthrough(), kind)
