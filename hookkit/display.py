#!/usr/bin/env python3
"""
hookkit - Terminal Display

Renders harness runs and transcripts with the `rich` library. Everything
that came from a hook or a transcript is printed as rich Text, never as
markup, so brackets in hook output are shown verbatim.

Color follows the mode: "always" forces ANSI styling, "never" emits plain
text, "auto" styles only on a terminal and honors NO_COLOR.
"""

import json
from collections import Counter
from typing import Any, Iterable, Optional, TextIO

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .formatters import (
    Line,
    decision_summary,
    describe_entry,
    error_pointer,
    format_json_line_for_debug,
    output_path_label,
)
from .harness import HookRun
from .transcript import LineError, TranscriptParseResult

_LINE_STYLES = {
    "approve": "bold green",
    "block": "bold red",
    "alert": "bold red",
    "dim": "dim",
}


def make_console(
    color_mode: str = "auto", file: Optional[TextIO] = None, stderr: bool = False
) -> Console:
    """Build a console for a color mode (auto, always, never). An explicit file wins over stderr."""
    if color_mode == "always":
        return Console(
            file=file, stderr=stderr, force_terminal=True, color_system="standard", soft_wrap=True
        )
    if color_mode == "never":
        return Console(
            file=file, stderr=stderr, color_system=None, no_color=True, highlight=False, soft_wrap=True
        )
    return Console(file=file, stderr=stderr, soft_wrap=True)


class HookDisplay:
    """Terminal display for the hookkit harness and transcript tools."""

    def __init__(
        self,
        color_mode: str = "auto",
        file: Optional[TextIO] = None,
        err_file: Optional[TextIO] = None,
    ) -> None:
        self._console = make_console(color_mode, file)
        self._err_console = make_console(color_mode, err_file, stderr=True)

    # =========================================================================
    # Primitives
    # =========================================================================

    def h1(self, text: str) -> None:
        self._console.print()
        self._console.print(Text(f"=== {text} ===", style="bold cyan"))

    def label(self, label: str, value: str) -> None:
        self._console.print(Text.assemble((f"{label}: ", "yellow"), value))

    def success(self, text: str) -> None:
        self._console.print(Text(text, style="bold green"))

    def error(self, text: str) -> None:
        self._console.print(Text(text, style="bold red"))

    def dimmed(self, text: str) -> None:
        self._console.print(Text(text, style="dim"))

    def block(self, text: str) -> None:
        self._console.print(Text(text))

    def json(self, data: Any) -> None:
        self._console.print_json(data=data, indent=2)

    # =========================================================================
    # Harness runs
    # =========================================================================

    def _summary_line(self, line: Line) -> None:
        if line.style == "label":
            self.label(line.text, line.value or "")
        elif line.style in ("approve", "block"):
            self._console.print(Text.assemble("Decision: ", (line.text, _LINE_STYLES[line.style])))
        else:
            self._console.print(Text(line.text, style=_LINE_STYLES[line.style]))

    def show_run(self, run: HookRun) -> None:
        """Print everything about a harness run, ending with what the host concludes."""
        self.h1("Running Hook")
        self.label("Command", " ".join(run.command))
        self.label("Event", run.kind.value)

        self.h1("Input JSON")
        self.json(json.loads(run.input_payload))

        self.h1("Execution")
        mark = Text("✓", style="bold green") if run.succeeded else Text("✗", style="bold red")
        self._console.print(Text.assemble(("Exit Code: ", "yellow"), f"{run.exit_code} ", mark))

        if run.stdout:
            self.h1("STDOUT")
            self.block(run.stdout_text.rstrip())
        if run.stderr:
            self.h1("STDERR")
            self.block(run.stderr_text.rstrip())

        structured = run.structured_output
        if structured is not None:
            self.h1("Hook Output (Parsed)")
            self.json(structured)
        elif run.parse_error is not None:
            self.h1("Hook Output (Raw - Failed to parse)")
            self.error(f"Parse error: {run.parse_error}")

        self.h1("What Claude/User Would See")
        self.label("Output", output_path_label(run.decision))
        for line in decision_summary(run.decision, run.kind):
            self._summary_line(line)

    # =========================================================================
    # Transcripts
    # =========================================================================

    def show_line_error(self, error: LineError) -> None:
        self.error(f"Error at line {error.line_number}: {error.json_error}")
        self._console.print()
        self.block("Raw line content:")
        self.dimmed(error.raw_text)
        self._console.print()
        self.block("Formatted for debugging:")
        self.block(format_json_line_for_debug(error.raw_text))

        pointer = error_pointer(error.column)
        if pointer is not None:
            self._console.print()
            self.block(f"Error location (column {error.column})")
            self._console.print(Text(pointer, style="yellow"))

    def show_transcript(self, path: str, result: TranscriptParseResult) -> None:
        """Print the parse summary, each entry, then the first error if any."""
        self.h1(f"TRANSCRIPT PARSING SUMMARY: {path}")
        self.block(f"Total lines: {result.total_lines}")
        self.block(f"Successfully parsed entries: {len(result.entries)}")
        if result.errors:
            self.error(f"Lines with errors: {len(result.errors)}")

        counts = Counter(entry.entry_type for entry in result.entries)
        if counts:
            table = Table(box=ROUNDED)
            table.add_column("Entry type", style="bold")
            table.add_column("Count", justify="right")
            for entry_type, count in counts.items():
                table.add_row(entry_type, str(count))
            self._console.print(table)

        for i, entry in enumerate(result.entries, start=1):
            self._console.print()
            self._console.print(Text(f"Entry {i}: {describe_entry(entry)}", style="bold blue"))
            self.json(entry.raw)

        if result.errors:
            self.h1("FIRST PARSE ERROR")
            self.show_line_error(result.errors[0])

    def show_verify(self, path: str, errors: Iterable[LineError]) -> None:
        """Print path:line: message to stderr per bad line. A clean file prints nothing."""
        for error in errors:
            self._err_console.print(Text(f"{path}:{error.line_number}: {error.json_error}", style="red"))

    def show_read_error(self, path: str, error: OSError) -> None:
        self._err_console.print(Text(f"{path}: cannot read transcript: {error.strerror or error}", style="bold red"))
