#!/usr/bin/env python3
"""
Unit tests for hookkit/eventlog.py

Tests recording hook events and rewriting parsed transcripts.
"""

import io
import json
import os
import sys
import tempfile
import pytest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, '.')
from hookkit.events import EventKind, StopInput, decode_input
from hookkit.eventlog import log_event, rewrite_transcript, run_log_hook


class TestLogEvent:
    """Tests for log_event."""

    def test_appends_json_lines(self, tmp_path):
        log_file = tmp_path / "events.jsonl"
        hook = StopInput(session_id="s", transcript_path="/tmp/t")

        log_event(EventKind.STOP, hook, log_file)
        log_event(EventKind.STOP, hook, log_file)

        lines = log_file.read_text().splitlines()
        assert len(lines) == 2
        record = json.loads(lines[0])
        assert set(record) == {"event", "timestamp", "data"}
        assert record["event"] == "stop"
        assert isinstance(record["timestamp"], int)
        assert record["data"]["session_id"] == "s"

    def test_logs_payload_as_received(self, tmp_path):
        log_file = tmp_path / "events.jsonl"
        payload = json.dumps({"session_id": "s", "transcript_path": "/t", "message": "m", "extra": [1]})
        hook = decode_input(payload, EventKind.NOTIFICATION)

        log_event(EventKind.NOTIFICATION, hook, log_file)

        record = json.loads(log_file.read_text())
        assert record["data"]["extra"] == [1]


class TestRewriteTranscript:
    """Tests for rewrite_transcript."""

    def test_drops_bad_lines(self, tmp_path):
        transcript = tmp_path / "t.jsonl"
        transcript.write_text(
            '{"type": "user", "message": {"content": "hi"}}\n'
            'corrupt\n'
            '{"type": "summary", "summary": "s"}\n'
        )
        output = tmp_path / "out.jsonl"
        output.write_text("stale\n")
        hook = StopInput(session_id="s", transcript_path=str(transcript))

        result = rewrite_transcript(hook, output)

        lines = output.read_text().splitlines()
        assert [json.loads(line)["type"] for line in lines] == ["user", "summary"]
        assert len(result.errors) == 1


class TestRunLogHook:
    """Tests for run_log_hook."""

    def test_records_and_passes_through(self, tmp_path, capsys):
        log_file = tmp_path / "events.jsonl"
        payload = {
            "session_id": "abc",
            "transcript_path": "/tmp/t",
            "tool_name": "Bash",
            "tool_input": {"command": "ls"},
        }
        with tempfile.TemporaryDirectory() as install_dir:
            with patch.dict(os.environ, {"HOOKKIT_INSTALL_DIR": install_dir}):
                with pytest.raises(SystemExit) as exc:
                    run_log_hook(
                        EventKind.PRE_TOOL_USE,
                        str(log_file),
                        stream=io.BytesIO(json.dumps(payload).encode()),
                    )
                session_log = next((Path(install_dir) / "logs" / "sessions").glob("*-abc.log"))
                hook_lines = session_log.read_text()

        assert exc.value.code == 0
        assert capsys.readouterr().out == "{}"
        record = json.loads(log_file.read_text())
        assert record["event"] == "pretool"
        assert record["data"] == payload
        assert "[HOOK] PreToolUse - received" in hook_lines
        assert f"[EVENT] pretool -> {log_file}" in hook_lines


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
