#!/usr/bin/env python3
"""
hookkit - Logging

File logger for hook runs and hook-side events. Lines go to a per-session
log and a daily rolling log under <install_dir>/logs, and logs/current.log
points at the latest session log.

Failing to write a log line never changes what a hook does.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import HookConfig

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_file_id(session_id: str) -> str:
    """Session id reduced to a single safe path component."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", session_id).lstrip(".")
    return cleaned or "unknown"


class HookLogger:
    """Logger for hookkit events, keyed by session."""

    def __init__(self, session_id: str = "unknown", config: Optional[HookConfig] = None):
        config = config or HookConfig()
        self.enabled = config.logging_enabled
        self.log_dir = Path(config.install_dir) / "logs"
        self.session_log_dir = self.log_dir / "sessions"
        self.session_id = session_id
        self._file_id = safe_file_id(session_id)

        if self.enabled:
            try:
                self.session_log_dir.mkdir(parents=True, exist_ok=True)
            except OSError:
                self.enabled = False

    def _get_timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _get_log_date(self) -> str:
        return datetime.now().strftime("%Y-%m-%d")

    def _sanitize_message(self, message: str) -> str:
        return message.replace("\n", "\\n")

    @property
    def session_log(self) -> Path:
        return self.session_log_dir / f"{self._get_log_date()}-{self._file_id}.log"

    def _append(self, path: Path, line: str) -> None:
        try:
            with open(path, "a") as f:
                f.write(line + "\n")
        except OSError:
            pass

    def _point_current_at(self, session_log: Path) -> None:
        current_log = self.log_dir / "current.log"
        try:
            if current_log.is_symlink() or current_log.exists():
                current_log.unlink()
            current_log.symlink_to(session_log)
        except OSError:
            pass

    def log_event(self, category: str, message: str) -> None:
        """Append one line to the session and daily logs."""
        if not self.enabled:
            return

        log_line = f"[{self._get_timestamp()}] [{category}] {self._sanitize_message(message)}"
        session_log = self.session_log
        self._append(session_log, log_line)
        # unsanitized id: it is line content, not a path
        self._append(self.log_dir / f"{self._get_log_date()}.log", f"[{self.session_id}] {log_line}")
        self._point_current_at(session_log)

    def log_hook(self, event: str, details: str = "") -> None:
        msg = event
        if details:
            msg = f"{event} - {details}"
        self.log_event("HOOK", msg)

    def log_run(self, command: str, exit_code: int, outcome: str) -> None:
        """Log a finished harness run."""
        self.log_event("RUN", f"{command} -> exit {exit_code} ({outcome})")

    def log_transcript(self, path: str, entries: Optional[int], errors: int) -> None:
        """Log a transcript read. entries is None when the file was only verified."""
        if entries is None:
            self.log_event("TRANSCRIPT", f"{path}: verified, {errors} errors")
        else:
            self.log_event("TRANSCRIPT", f"{path}: {entries} entries, {errors} errors")

    def log_recorded(self, event: str, file_path: str) -> None:
        self.log_event("EVENT", f"{event} -> {file_path}")

    def log_error(self, message: str) -> None:
        self.log_event("ERROR", message)
