"""Command-line interface for claude-sidecar."""

from __future__ import annotations

import sys
import typing as typ
from pathlib import (
    Path,  # noqa: TC003  # Path required at runtime for cyclopts annotations.
)

import cyclopts

from claude_sidecar import __version__
from claude_sidecar.cli.helpers import (
    edit_text,
    format_message_list,
    normalize_message,
    plural,
    read_stdin_text,
)
from claude_sidecar.cli.interactive import InputSession, install_completer
from claude_sidecar.core import MessageQueue
from claude_sidecar.hooks.dispatch import HookVariant, run_hook
from claude_sidecar.installer.install import install
from claude_sidecar.lock import SidecarError
from claude_sidecar.logs import configure_logging

app = cyclopts.App(
    name="claude-sidecar",
    help="Interactive steering for Claude Code during tool execution.",
    version=__version__,
    version_flags=["--version", "-V"],
)

app.command(install, name="init")


@app.default
def main_help() -> None:
    """Show help message when no command is specified."""
    app.parse_args(["--help"])


@app.command
def start(*, base_dir: Path | None = None) -> int:
    """Start the interactive input session.

    Args:
        base_dir: Storage directory (overrides CLAUDE_SIDECAR_DIR).

    Returns:
        Exit code (always 0).

    """
    session = InputSession(MessageQueue(base_dir))
    if sys.stdin.isatty():
        install_completer()
    return session.run()


@app.command
def add(
    text: str | None = None,
    *,
    editor: bool = False,
    base_dir: Path | None = None,
) -> int:
    """Queue one message without starting a session.

    The message comes from TEXT, else from $EDITOR with --editor, else stdin.

    Args:
        text: Message text.
        editor: Compose the message in $EDITOR.
        base_dir: Storage directory (overrides CLAUDE_SIDECAR_DIR).

    Returns:
        Exit code (0 on success).

    """
    if text is not None:
        raw = text
    elif editor:
        raw = edit_text("")
    else:
        raw = read_stdin_text()
    body = normalize_message(raw)

    queue = MessageQueue(base_dir)
    queue.enqueue(body)
    count = queue.size()
    sys.stdout.write(f"Message queued ({plural(count, 'message')} in queue)\n")
    return 0


@app.command
def status(*, base_dir: Path | None = None) -> int:
    """Show current queue status.

    Args:
        base_dir: Storage directory (overrides CLAUDE_SIDECAR_DIR).

    Returns:
        Exit code (always 0).

    """
    try:
        messages = MessageQueue(base_dir).peek()
    except SidecarError as e:
        sys.stderr.write(f"claude-sidecar: {e}\n")
        return 0

    sys.stdout.write("Claude Sidecar Queue Status\n")
    sys.stdout.write("-" * 50 + "\n")
    if not messages:
        sys.stdout.write("Queue is empty\n")
        return 0

    sys.stdout.write(f"{plural(len(messages), 'message')} in queue:\n\n")
    for line in format_message_list(messages):
        sys.stdout.write(line + "\n")
    return 0


@app.command
def clear(*, base_dir: Path | None = None) -> int:
    """Clear all queued messages.

    Args:
        base_dir: Storage directory (overrides CLAUDE_SIDECAR_DIR).

    Returns:
        Exit code (always 0).

    """
    try:
        messages = MessageQueue(base_dir).drain_all()
    except SidecarError as e:
        sys.stderr.write(f"claude-sidecar: {e}\n")
        return 0

    if messages:
        sys.stdout.write(f"Cleared {plural(len(messages), 'message')} from queue\n")
    else:
        sys.stdout.write("Queue was already empty\n")
    return 0


@app.command
def hook(
    *,
    variant: typ.Literal["pre", "post"] = "pre",
    base_dir: Path | None = None,
) -> int:
    """Hook handler for Claude Code (called automatically).

    Args:
        variant: "pre" for PreToolUse (stderr, exit 2), "post" for PostToolUse
            (stdout, exit 0).
        base_dir: Storage directory (overrides CLAUDE_SIDECAR_DIR).

    Returns:
        Exit code Claude Code interprets.

    """
    return run_hook(HookVariant(variant), base_dir=base_dir)


def main() -> int:
    """Run the claude-sidecar CLI.

    Returns:
        Exit code.

    """
    configure_logging()
    try:
        result = app()
        return result if isinstance(result, int) else 0
    except (SidecarError, ValueError, RuntimeError) as e:
        sys.stderr.write(f"claude-sidecar: {e}\n")
        return 1
    except KeyboardInterrupt:
        sys.stderr.write("\n")
        return 130
