"""Claude Code tool-step hook that delivers queued feedback.

At every checkpoint this hook:
1. Drains the message queue
2. If messages were queued, writes them as a numbered block and signals
   Claude Code with the variant's "messages present" exit code
3. If the queue is empty, or anything goes wrong, exits 0 silently

Two variants exist because Claude Code reads hooks differently per event:

- ``pre`` (PreToolUse): the block goes to stderr and the hook exits 2, which
  blocks the tool call and feeds stderr back to Claude.
- ``post`` (PostToolUse): the block goes to stdout and the hook exits 0; it is
  informational only.

Failures are never allowed to block Claude Code, so every error takes the
silent exit-0 path and is only recorded in the optional log file.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import sys
import typing as typ

from claude_sidecar.core import MessageQueue
from claude_sidecar.logs import configure_logging

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from claude_sidecar.store import Message

logger = logging.getLogger(__name__)

BANNER = "=== User Feedback from Claude Sidecar ==="
FOOTER = "=========================================="


class HookVariant(enum.StrEnum):
    """Checkpoint the hook is installed at."""

    PRE = "pre"
    POST = "post"


@dataclasses.dataclass(frozen=True)
class Proceed:
    """Nothing to report; let Claude Code continue."""


@dataclasses.dataclass(frozen=True)
class Block:
    """Queued feedback to surface to Claude Code."""

    text: str


HookDecision = Proceed | Block


@dataclasses.dataclass(frozen=True)
class _Signal:
    stream: typ.Literal["stdout", "stderr"]
    exit_code: int


_SIGNALS: dict[HookVariant, _Signal] = {
    HookVariant.PRE: _Signal(stream="stderr", exit_code=2),
    HookVariant.POST: _Signal(stream="stdout", exit_code=0),
}


def format_feedback(messages: cabc.Sequence[Message]) -> str:
    """Render drained messages as the banner block Claude sees.

    Parameters
    ----------
    messages : Sequence[Message]
        Messages in drain order.

    Returns
    -------
    str
        Banner, one ``[i/N] text`` line per message, and footer, each line
        newline-terminated.

    """
    total = len(messages)
    lines = [BANNER]
    lines.extend(f"[{i}/{total}] {m.text}" for i, m in enumerate(messages, 1))
    lines.append(FOOTER)
    return "\n".join(lines) + "\n"


def decide(queue: MessageQueue) -> HookDecision:
    """Drain ``queue`` and decide what to tell Claude Code.

    Any exception while draining yields ``Proceed`` so a broken queue never
    blocks a tool call.
    """
    try:
        messages = queue.drain_all()
    except Exception:  # noqa: BLE001
        logger.warning("hook drain failed; proceeding", exc_info=True)
        return Proceed()

    if not messages:
        return Proceed()
    return Block(format_feedback(messages))


def emit(
    decision: HookDecision,
    variant: HookVariant,
    *,
    stdout: typ.TextIO | None = None,
    stderr: typ.TextIO | None = None,
) -> int:
    """Write a decision to the variant's stream and return the exit code.

    Parameters
    ----------
    decision : HookDecision
        Result of ``decide``.
    variant : HookVariant
        Checkpoint the hook runs at.
    stdout, stderr : TextIO | None, optional
        Streams to write to; default to ``sys.stdout`` / ``sys.stderr``.

    Returns
    -------
    int
        0 for ``Proceed``; the variant's exit code for ``Block``.

    """
    match decision:
        case Block(text=text):
            signal = _SIGNALS[variant]
            if signal.stream == "stderr":
                out = stderr or sys.stderr
            else:
                out = stdout or sys.stdout
            out.write(text)
            out.flush()
            return signal.exit_code
        case _:
            return 0


def run_hook(
    variant: HookVariant = HookVariant.PRE,
    *,
    base_dir: Path | None = None,
) -> int:
    """Drain the queue and report to Claude Code.

    Args:
        variant: Checkpoint the hook runs at.
        base_dir: Queue storage directory. Defaults to the per-user queue.

    Returns:
        Process exit code for the hook.

    """
    try:
        queue = MessageQueue(base_dir)
    except Exception:  # noqa: BLE001
        # Home directory lookup can fail in stripped-down environments.
        logger.warning("hook could not locate queue; proceeding", exc_info=True)
        return 0
    return emit(decide(queue), variant)


def main() -> int:
    """Run the PreToolUse hook."""
    configure_logging()
    return run_hook(HookVariant.PRE)


def post_main() -> int:
    """Run the PostToolUse hook."""
    configure_logging()
    return run_hook(HookVariant.POST)


if __name__ == "__main__":
    raise SystemExit(main())
