#!/usr/bin/env python3
"""
hookkit - Configuration

Environment variables locate the install directory and a JSON config file;
settings are read from the file by dot-notation path. A missing or unreadable
file means defaults everywhere.

Environment:
    HOOKKIT_INSTALL_DIR   default ~/.claude/hookkit
    HOOKKIT_CONFIG_FILE   default <install_dir>/config/hookkit.json

Example config:
    {
      "harness": {"transcriptPath": "/tmp/t.jsonl", "defaultTool": "Bash", "timeoutSeconds": 30},
      "display": {"color": "auto"},
      "logging": {"enabled": true}
    }
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

DEFAULT_TRANSCRIPT_PATH = "/tmp/transcript.json"
DEFAULT_TOOL = "Bash"
COLOR_MODES = ("auto", "always", "never")


def get_install_dir() -> Path:
    return Path(os.environ.get(
        "HOOKKIT_INSTALL_DIR",
        str(Path.home() / ".claude" / "hookkit")
    ))


def get_config_value(path: str, config_file: str) -> Any:
    """Read a value from JSON config using dot-notation path. Returns the value or None."""
    parts = path.split('.')

    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None

    for part in parts:
        if isinstance(data, dict):
            data = data.get(part)
        else:
            return None

    return data


class HookConfig:
    """Settings for the harness, display and logging."""

    def __init__(self, config_file: Optional[str] = None):
        self.install_dir = get_install_dir()
        self.config_file = config_file or os.environ.get(
            "HOOKKIT_CONFIG_FILE",
            str(self.install_dir / "config" / "hookkit.json")
        )

    def get(self, path: str, default: Any = None) -> Any:
        value = get_config_value(path, self.config_file)
        return default if value is None else value

    @property
    def transcript_path(self) -> str:
        value = self.get("harness.transcriptPath")
        return value if isinstance(value, str) else DEFAULT_TRANSCRIPT_PATH

    @property
    def default_tool(self) -> str:
        value = self.get("harness.defaultTool")
        return value if isinstance(value, str) else DEFAULT_TOOL

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Hook process timeout. None (the default) waits indefinitely."""
        value = self.get("harness.timeoutSeconds")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            return None
        return value

    @property
    def color_mode(self) -> str:
        value = self.get("display.color")
        return value if value in COLOR_MODES else "auto"

    @property
    def logging_enabled(self) -> bool:
        return self.get("logging.enabled") is not False
