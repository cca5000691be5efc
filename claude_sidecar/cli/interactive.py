"""Interactive producer loop behind ``claude-sidecar start``.

Every line typed is queued as feedback for Claude's next tool step; lines
starting with ``/`` are session commands.
"""

from __future__ import annotations

import dataclasses
import sys
import typing as typ

from claude_sidecar.cli.helpers import format_message_list, plural
from claude_sidecar.lock import SidecarError

if typ.TYPE_CHECKING:
    from claude_sidecar.core import MessageQueue

RULE = "-" * 50
PROMPT = "> "


@dataclasses.dataclass(frozen=True)
class SessionCommand:
    """A slash command understood by the interactive session."""

    name: str
    description: str


COMMANDS = (
    SessionCommand("/status", "View queued messages"),
    SessionCommand("/clear", "Clear message queue"),
    SessionCommand("/help", "Show available commands"),
    SessionCommand("/exit", "Exit the program"),
)


def complete_command(text: str) -> list[str]:
    """Return slash commands matching ``text``.

    Plain text gets no completions; ``/`` alone, or a prefix matching
    nothing, offers every command.
    """
    if not text.startswith("/"):
        return []
    names = [c.name for c in COMMANDS]
    hits = [n for n in names if n.startswith(text)]
    return hits or names


def install_completer() -> None:
    """Enable tab-completion of slash commands where readline exists."""
    try:
        import readline  # noqa: PLC0415
    except ImportError:
        # Not available on every platform; the session works without it.
        return

    def _complete(text: str, state: int) -> str | None:
        matches = complete_command(text)
        return matches[state] if state < len(matches) else None

    readline.set_completer_delims(" \t\n")
    readline.set_completer(_complete)
    readline.parse_and_bind("tab: complete")


class InputSession:
    """Read feedback lines and queue them until the user exits.

    Args:
        queue: Queue that receives messages.
        stdin: Stream to read lines from (defaults to ``sys.stdin``).
        stdout: Stream to write to (defaults to ``sys.stdout``).

    """

    def __init__(
        self,
        queue: MessageQueue,
        *,
        stdin: typ.TextIO | None = None,
        stdout: typ.TextIO | None = None,
    ) -> None:
        """Initialize the session."""
        self.queue = queue
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _say(self, text: str = "") -> None:
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def _read_line(self) -> str | None:
        if self.stdin is sys.stdin and sys.stdin.isatty():
            try:
                return input(PROMPT)
            except EOFError:
                return None
        self.stdout.write(PROMPT)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def show_banner(self) -> None:
        """Print the session introduction."""
        self._say("Claude Sidecar - Interactive Steering")
        self._say(RULE)
        self._say("Type your feedback and press Enter to queue it.")
        self._say("Messages will be sent at the next tool step.")
        self._say("Type /help for commands, /exit or Ctrl-D to leave.")
        self._say(RULE)
        self._say()

    def show_help(self) -> None:
        """Print the slash command table."""
        self._say()
        self._say("Available commands:")
        self._say("-" * 40)
        for cmd in COMMANDS:
            self._say(f"{cmd.name:<12}{cmd.description}")
        self._say("-" * 40)
        self._say("Tip: type anything else to queue it as feedback")

    def show_status(self) -> None:
        """Print the queued messages."""
        try:
            messages = self.queue.peek()
        except SidecarError as e:
            self._say(f"Failed to read queue: {e}")
            return
        self._say()
        self._say(f"Queue status: {plural(len(messages), 'message')}")
        for line in format_message_list(messages):
            self._say(f"  {line}")

    def clear_queue(self) -> None:
        """Drop every queued message."""
        try:
            messages = self.queue.drain_all()
        except SidecarError as e:
            self._say(f"Failed to clear queue: {e}")
            return
        if messages:
            self._say(f"Cleared {plural(len(messages), 'message')} from queue")
        else:
            self._say("Queue was already empty")

    def submit(self, text: str) -> None:
        """Queue ``text`` and report the new queue size."""
        try:
            self.queue.enqueue(text)
        except SidecarError as e:
            self._say(f"Failed to queue message: {e}")
            return
        count = self.queue.size()
        self._say(f"Message queued ({plural(count, 'message')} in queue)")

    def handle_line(self, line: str) -> bool:
        """Process one input line.

        Returns:
            False when the session should end, True otherwise.

        """
        trimmed = line.strip()
        if not trimmed:
            return True
        if not trimmed.startswith("/"):
            self.submit(trimmed)
            return True

        match trimmed.lower():
            case "/exit":
                return False
            case "/status":
                self.show_status()
            case "/clear":
                self.clear_queue()
            case "/help":
                self.show_help()
            case _:
                self._say(f"Unknown command: {trimmed}")
                self.show_help()
        return True

    def run(self) -> int:
        """Run the session until ``/exit``, EOF or Ctrl-C.

        Returns:
            Exit code (always 0).

        """
        self.show_banner()
        try:
            while True:
                line = self._read_line()
                if line is None or not self.handle_line(line):
                    break
        except KeyboardInterrupt:
            self._say()
        self._say("Goodbye.")
        return 0
