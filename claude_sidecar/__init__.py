"""claude-sidecar: steer Claude Code from a second terminal.

Provides a file-backed, lock-protected message queue that an interactive
session fills and a Claude Code hook drains at the next tool step.
"""

from __future__ import annotations

import logging

from claude_sidecar.core import MessageQueue, default_base_dir
from claude_sidecar.lock import LockUnavailableError, SidecarError
from claude_sidecar.store import Message, StorageUnavailableError

__version__ = "0.1.0"
__all__ = [
    "LockUnavailableError",
    "Message",
    "MessageQueue",
    "SidecarError",
    "StorageUnavailableError",
    "__version__",
    "default_base_dir",
]

# Hooks speak to Claude Code through stdout/stderr; keep stray log records off
# them unless an entry point configures a handler.
logging.getLogger(__name__).addHandler(logging.NullHandler())
