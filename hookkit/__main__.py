#!/usr/bin/env python3
"""
hookkit - Command Line

Exercise hooks without a live agent, record real events, and inspect
transcripts.

Usage:
    hookkit [--color | --no-color] COMMAND ...

Commands:
    pretool         Run a hook with a synthesized PreToolUse event
    posttool        Run a hook with a synthesized PostToolUse event
    notification    Run a hook with a synthesized Notification event
    stop            Run a hook with a synthesized Stop event
    subagentstop    Run a hook with a synthesized SubagentStop event
    log             Act as a hook that records each event to a JSONL file
    transcript      Parse and display (or verify) transcript files

Examples:
    hookkit pretool --tool Bash --tool-input command="rm -rf /" -- ./my-hook
    hookkit posttool --tool-response-json exit_code=1 -- python3 check.py
    hookkit stop --active -- ./stop-hook
    hookkit log pretool /tmp/events.jsonl
    hookkit transcript --verify ~/.claude/projects/*/*.jsonl

Environment Variables:
    HOOKKIT_INSTALL_DIR   - Logs and config location (default ~/.claude/hookkit)
    HOOKKIT_CONFIG_FILE   - JSON config file
    NO_COLOR              - Disable colored output in auto mode
"""

import argparse
import sys
from typing import List, Optional

from .config import HookConfig
from .display import HookDisplay
from .errors import HookError
from .eventlog import run_log_hook
from .events import EventKind
from .harness import (
    DEFAULT_NOTIFICATION_MESSAGE,
    build_input,
    combine_inputs,
    default_tool_input,
    default_tool_response,
    execute_hook,
    generate_session_id,
)
from .logger import HookLogger
from .transcript import read_line_errors, read_transcript


def _color_mode(args, config: HookConfig) -> str:
    if args.color:
        return "always"
    if args.no_color:
        return "never"
    return config.color_mode


def _hook_command(hook_args: List[str]) -> List[str]:
    if hook_args and hook_args[0] == "--":
        return hook_args[1:]
    return hook_args


def cmd_run(args) -> int:
    """Run a hook against a synthesized event and show what the host would conclude."""
    kind = EventKind.from_cli_name(args.command)
    config = HookConfig()
    hook_args = _hook_command(args.hook_args)
    if not hook_args:
        raise ValueError("No hook command provided. Use -- followed by the hook command.")

    session_id = args.sessionid or generate_session_id()
    options = {}

    if kind.is_tool_event:
        tool = args.tool or config.default_tool
        options["tool_name"] = tool
        if args.tool_input or args.tool_input_json:
            options["tool_input"] = combine_inputs(None, args.tool_input, args.tool_input_json)
        else:
            options["tool_input"] = default_tool_input(tool)
    if kind is EventKind.POST_TOOL_USE:
        if args.tool_response or args.tool_response_json:
            options["tool_response"] = combine_inputs(
                None, args.tool_response, args.tool_response_json
            )
        else:
            options["tool_response"] = default_tool_response()
    if kind is EventKind.NOTIFICATION:
        options["message"] = args.message
        options["title"] = args.title
    if kind.is_stop_event:
        options["stop_hook_active"] = args.active

    hook_input = build_input(
        kind,
        session_id=session_id,
        transcript_path=args.transcript or config.transcript_path,
        **options
    )

    timeout = args.timeout if args.timeout is not None else config.timeout_seconds
    logger = HookLogger(session_id, config)
    try:
        run = execute_hook(hook_args, hook_input, timeout=timeout)
    except (HookError, OSError) as e:
        logger.log_error(f"{' '.join(hook_args)}: {e}")
        raise

    logger.log_run(" ".join(run.command), run.exit_code, run.decision.control.value)
    HookDisplay(_color_mode(args, config)).show_run(run)
    return 0


def cmd_log(args) -> int:
    """Record the event on stdin and answer with passthrough."""
    kind = EventKind.from_cli_name(args.event)
    run_log_hook(kind, args.file, args.transcript)
    return 0


def cmd_transcript(args) -> int:
    """Display or verify transcripts. Returns 1 if any file had a bad line or could not be read."""
    config = HookConfig()
    display = HookDisplay(_color_mode(args, config))
    logger = HookLogger("transcript", config)
    failed = False

    for path in args.paths:
        try:
            if args.verify:
                errors = read_line_errors(path)
            else:
                result = read_transcript(path)
        except OSError as e:
            display.show_read_error(path, e)
            logger.log_error(f"{path}: {e}")
            failed = True
            continue

        if args.verify:
            logger.log_transcript(path, None, len(errors))
            display.show_verify(path, errors)
            failed = failed or bool(errors)
        else:
            logger.log_transcript(path, len(result.entries), len(result.errors))
            display.show_transcript(path, result)
            failed = failed or not result.ok

    return 1 if failed else 0


def _add_run_options(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--sessionid", help="Session ID (default: test-session-<timestamp>)")
    sub.add_argument("--transcript", help="Transcript path sent to the hook (default: /tmp/transcript.json)")
    sub.add_argument("--timeout", type=float, default=None,
                     help="Seconds to wait for the hook before failing")


def _add_tool_options(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--tool", help="Tool name (default: Bash)")
    sub.add_argument("--tool-input", action="append", default=[], metavar="KEY=VALUE",
                     help="Tool input string value (repeatable)")
    sub.add_argument("--tool-input-json", action="append", default=[], metavar="KEY=JSON",
                     help="Tool input JSON value, overrides --tool-input (repeatable)")


def _add_hook_command(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("hook_args", nargs=argparse.REMAINDER,
                     help="Hook command and its arguments, after --")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookkit",
        description="hookkit - Build, test and debug agent lifecycle hooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    color = parser.add_mutually_exclusive_group()
    color.add_argument("--color", action="store_true", help="Force colored output")
    color.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # pretool command
    pretool_parser = subparsers.add_parser("pretool", help="Run a PreToolUse hook")
    _add_run_options(pretool_parser)
    _add_tool_options(pretool_parser)
    _add_hook_command(pretool_parser)
    pretool_parser.set_defaults(func=cmd_run)

    # posttool command
    posttool_parser = subparsers.add_parser("posttool", help="Run a PostToolUse hook")
    _add_run_options(posttool_parser)
    _add_tool_options(posttool_parser)
    posttool_parser.add_argument("--tool-response", action="append", default=[], metavar="KEY=VALUE",
                                 help="Tool response string value (repeatable)")
    posttool_parser.add_argument("--tool-response-json", action="append", default=[], metavar="KEY=JSON",
                                 help="Tool response JSON value, overrides --tool-response (repeatable)")
    _add_hook_command(posttool_parser)
    posttool_parser.set_defaults(func=cmd_run)

    # notification command
    notification_parser = subparsers.add_parser("notification", help="Run a Notification hook")
    _add_run_options(notification_parser)
    notification_parser.add_argument("--message", default=DEFAULT_NOTIFICATION_MESSAGE,
                                     help="Notification message")
    notification_parser.add_argument("--title", help="Notification title")
    _add_hook_command(notification_parser)
    notification_parser.set_defaults(func=cmd_run)

    # stop and subagentstop commands
    for name, help_text in (("stop", "Run a Stop hook"), ("subagentstop", "Run a SubagentStop hook")):
        stop_parser = subparsers.add_parser(name, help=help_text)
        _add_run_options(stop_parser)
        stop_parser.add_argument("--active", action="store_true",
                                 help="Set stop_hook_active (a stop hook already blocked once)")
        _add_hook_command(stop_parser)
        stop_parser.set_defaults(func=cmd_run)

    # log command
    log_parser = subparsers.add_parser("log", help="Record events received on stdin")
    log_parser.add_argument("event", help="Event type: pretool, posttool, notification, stop, subagentstop")
    log_parser.add_argument("file", help="JSONL file to append events to")
    log_parser.add_argument("--transcript", metavar="OUT",
                            help="Also rewrite OUT with the parsed transcript entries")
    log_parser.set_defaults(func=cmd_log)

    # transcript command
    transcript_parser = subparsers.add_parser("transcript", help="Display or verify transcripts")
    transcript_parser.add_argument("paths", nargs="+", metavar="PATH", help="Transcript files")
    transcript_parser.add_argument("--verify", action="store_true",
                                   help="Only report bad lines, as path:line: message on stderr; silent when clean")
    transcript_parser.set_defaults(func=cmd_transcript)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n\nAborted by user.", file=sys.stderr)
        return 130
    except (HookError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
