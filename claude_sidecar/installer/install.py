"""Register the claude-sidecar hook in Claude Code settings.

Backs ``claude-sidecar init``. The hook is added to the ``"*"`` matcher of the
``PreToolUse`` (or, with ``--post``, ``PostToolUse``) event so it runs around
every tool call.

Examples
--------
Dry-run the settings change::

    claude-sidecar init --dry-run

Invoke the installer programmatically::

    from claude_sidecar.installer.install import install

    install(dry_run=True)

"""

from __future__ import annotations

import datetime as dt
import os
import sys
import typing as typ
from pathlib import Path

from claude_sidecar.installer.json5_helpers import dumps, loads

HOOK_COMMAND = "claude-sidecar hook"
POST_HOOK_COMMAND = "claude-sidecar hook --variant post"
WILDCARD = "*"


def find_settings_file(settings_path: Path | None = None) -> Path:
    """Locate Claude Code's settings.json.

    Parameters
    ----------
    settings_path : Path | None, optional
        Explicit path; returned as-is.

    Returns
    -------
    Path
        The first existing candidate, or ``~/.claude/settings.json`` when none
        exists yet.

    """
    if settings_path:
        return settings_path

    xdg_config_env = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_env:
        xdg_config = Path(xdg_config_env).expanduser()
    else:
        xdg_config = Path.home() / ".config"

    home_settings = Path.home() / ".claude" / "settings.json"
    for path in (xdg_config / "claude" / "settings.json", home_settings):
        if path.exists():
            return path
    return home_settings


def has_hook(entries: list[typ.Any], command: str) -> bool:
    """Return True if any matcher in ``entries`` already runs ``command``."""
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        hooks = entry.get("hooks")
        if not isinstance(hooks, list):
            continue
        if any(isinstance(h, dict) and h.get("command") == command for h in hooks):
            return True
    return False


def add_hook(entries: list[typ.Any], command: str) -> bool:
    """Add ``command`` to the wildcard matcher, creating it if needed.

    Returns
    -------
    bool
        True if an existing wildcard matcher was extended, False if a new
        matcher entry was appended.

    Raises
    ------
    ValueError
        If the existing wildcard matcher's ``hooks`` is not a list.

    """
    hook = {"type": "command", "command": command}
    for entry in entries:
        if isinstance(entry, dict) and entry.get("matcher") == WILDCARD:
            hooks = entry.setdefault("hooks", [])
            if not isinstance(hooks, list):
                msg = "wildcard matcher 'hooks' must be a list"
                raise ValueError(msg)  # noqa: TRY004
            hooks.append(hook)
            return True
    entries.append({"matcher": WILDCARD, "hooks": [hook]})
    return False


def _backup(settings_file: Path) -> Path:
    timestamp = dt.datetime.now(tz=dt.UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = settings_file.with_suffix(f".backup.{timestamp}.json")
    backup_path.write_text(
        settings_file.read_text(encoding="utf-8"),
        encoding="utf-8",
    )
    return backup_path


def install(  # noqa: C901, PLR0911
    *,
    settings_path: Path | None = None,
    post: bool = False,
    dry_run: bool = False,
) -> int:
    """Initialize Claude Sidecar with Claude Code.

    Operation is idempotent - safe to run multiple times.

    Parameters
    ----------
    settings_path : Path | None, optional
        Path to settings.json (auto-detected if not specified).
    post : bool, optional
        Install the PostToolUse variant instead of PreToolUse.
    dry_run : bool, optional
        Show what would be done without making changes.

    Returns
    -------
    int
        Exit code (0 on success or when already configured, 1 on error).

    """
    settings_file = find_settings_file(settings_path)
    event = "PostToolUse" if post else "PreToolUse"
    command = POST_HOOK_COMMAND if post else HOOK_COMMAND

    exists = settings_file.exists()
    if exists:
        sys.stdout.write(f"Found settings: {settings_file}\n")
        try:
            settings = loads(settings_file.read_text(encoding="utf-8"))
        except Exception as e:  # noqa: BLE001  # json5kit raises assorted errors
            sys.stderr.write(f"Error parsing settings.json: {e}\n")
            return 1
    else:
        sys.stdout.write(f"Creating settings: {settings_file}\n")
        settings = {}

    match settings.get("hooks"):
        case None:
            hooks = settings["hooks"] = {}
        case dict() as hooks:
            pass
        case _:
            sys.stderr.write("Error: settings.json hooks must be an object.\n")
            return 1

    match hooks.get(event):
        case None:
            entries = hooks[event] = []
        case list() as entries:
            pass
        case _:
            sys.stderr.write(f"Error: settings.json hooks.{event} must be a list.\n")
            return 1

    if has_hook(entries, command):
        sys.stdout.write("Claude Sidecar hook already configured\n")
        return 0

    try:
        extended = add_hook(entries, command)
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1
    where = "existing wildcard matcher" if extended else "new wildcard matcher"

    if dry_run:
        sys.stdout.write(f"\n[DRY RUN] Would add to {event} ({where}):\n")
        sys.stdout.write(f"  - {command}\n")
        return 0

    try:
        if exists:
            backup_path = _backup(settings_file)
            sys.stdout.write(f"Created backup: {backup_path}\n")
        else:
            settings_file.parent.mkdir(parents=True, exist_ok=True)
        settings_file.write_text(dumps(settings), encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"Error writing settings.json: {e}\n")
        return 1

    sys.stdout.write(f"\nSuccessfully added to {event} ({where}):\n")
    sys.stdout.write(f"  - {command}\n")
    sys.stdout.write("\nUsage:\n")
    sys.stdout.write("  1. Start Claude Code in one terminal\n")
    sys.stdout.write('  2. Run "claude-sidecar start" in another terminal\n')
    sys.stdout.write(
        "  3. Type feedback that will be sent to Claude at the next tool step\n"
    )
    return 0
