r"""Helper utilities for the claude-sidecar CLI commands.

Provides editor invocation, stdin handling and the text formatting shared by
the one-shot commands and the interactive session.

Examples
--------
Describe the queue after an enqueue::

    from claude_sidecar.cli.helpers import plural

    plural(2, "message")  # "2 messages"

"""

from __future__ import annotations

import datetime as dt
import os
import shlex
import sys
import tempfile
import typing as typ
from pathlib import Path

from cuprum import (
    ExecutionContext,
    Program,
    ProgramCatalogue,
    ProjectSettings,
    sh,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from cuprum import CommandResult, SafeCmd

    from claude_sidecar.store import Message


def editor_cmd() -> list[str]:
    """Get editor command from environment variables.

    Checks VISUAL first, then EDITOR, defaults to vi.
    Supports editors with arguments like "code --wait".

    Returns
    -------
    list[str]
        Command parts in ``[executable, *args]`` form.

    """
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    try:
        tokens = shlex.split(editor)
    except ValueError:
        return ["vi"]
    return tokens or ["vi"]


def _editor_builder(program: Program) -> typ.Callable[..., SafeCmd]:
    project = ProjectSettings(
        name="claude-sidecar",
        programs=(program,),
        documentation_locations=(),
        noise_rules=(),
    )
    catalogue = ProgramCatalogue(projects=(project,))
    return sh.make(program, catalogue=catalogue)


def run_editor(cmd: cabc.Sequence[str]) -> CommandResult:
    """Run ``cmd`` through cuprum with the terminal left attached.

    Output is not captured so full-screen editors keep the tty.
    """
    builder = _editor_builder(Program(cmd[0]))
    return builder(*cmd[1:]).run_sync(
        context=ExecutionContext(), echo=False, capture=False
    )


def edit_text(initial: str = "") -> str:
    """Open text in the user's editor and return what they saved.

    Parameters
    ----------
    initial : str, optional
        Initial text to populate the editor with.

    Returns
    -------
    str
        Edited text content.

    Raises
    ------
    RuntimeError
        If the editor exits with a non-zero status.

    """
    with tempfile.NamedTemporaryFile(
        "w+", encoding="utf-8", delete=False, prefix="sidecar.", suffix=".txt"
    ) as tf:
        path = Path(tf.name)
        tf.write(initial)
        tf.flush()

    try:
        cmd = [*editor_cmd(), str(path)]
        result = run_editor(cmd)
        if not result.ok:
            msg = f"editor exited with status {result.exit_code}: {' '.join(cmd)}"
            raise RuntimeError(msg)
        return path.read_text(encoding="utf-8")
    finally:
        path.unlink(missing_ok=True)


def read_stdin_text() -> str:
    """Read all text from stdin without modification."""
    return sys.stdin.read()


def normalize_message(text: str) -> str:
    """Strip surrounding whitespace from a message and reject blank ones.

    Raises
    ------
    ValueError
        If nothing but whitespace was supplied.

    """
    body = text.strip()
    if not body:
        msg = "message is empty"
        raise ValueError(msg)
    return body


def plural(count: int, noun: str) -> str:
    """Return ``"<count> <noun>"`` with an ``s`` unless count is 1."""
    return f"{count} {noun}{'' if count == 1 else 's'}"


def format_clock(timestamp: str) -> str:
    """Render an ISO timestamp as local ``HH:MM:SS``.

    Unparsable timestamps are returned unchanged.
    """
    try:
        when = dt.datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    if when.tzinfo is not None:
        when = when.astimezone()
    return when.strftime("%H:%M:%S")


def format_message_list(messages: cabc.Sequence[Message]) -> list[str]:
    """Return ``i. [HH:MM:SS] text`` lines for a status listing."""
    return [
        f"{i}. [{format_clock(m.timestamp)}] {m.text}"
        for i, m in enumerate(messages, 1)
    ]
