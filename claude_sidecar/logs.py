"""Logging setup for claude-sidecar entry points.

Diagnostics only ever go to the file named by ``CLAUDE_SIDECAR_LOG_FILE``.
The hook's stdout and stderr are part of its protocol with Claude Code, so no
stream handler is ever installed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(process)d %(name)s %(levelname)s: %(message)s"


def configure_logging() -> logging.Handler | None:
    """Attach a file handler to the package logger when configured.

    Reads ``CLAUDE_SIDECAR_LOG_FILE`` and ``CLAUDE_SIDECAR_LOG_LEVEL``
    (default ``WARNING``). Calling it more than once does not add duplicate
    handlers.

    Returns:
        The installed handler, or None if logging is not configured.

    """
    log_file = os.environ.get("CLAUDE_SIDECAR_LOG_FILE")
    if not log_file:
        return None

    root = logging.getLogger("claude_sidecar")
    path = Path(log_file).expanduser()
    for existing in root.handlers:
        if (
            isinstance(existing, logging.FileHandler)
            and existing.baseFilename == os.path.abspath(path)
        ):
            return existing

    level_name = os.environ.get("CLAUDE_SIDECAR_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # An unwritable log file must not take the CLI or hook down with it.
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
    return handler
