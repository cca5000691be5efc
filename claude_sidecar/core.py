"""Lock-protected message queue shared by every claude-sidecar process.

Producers (the interactive session, ``claude-sidecar add``) append messages;
the hook drains them all at once. Every operation takes the lock file, re-reads
the document and releases the lock before returning, so no state is cached
between calls or across processes.
"""

from __future__ import annotations

import contextlib
import os
import typing as typ
from pathlib import Path

from claude_sidecar.lock import (
    DEFAULT_MAX_RETRIES,
    LOCK_BACKOFF_SECONDS,
    STALE_LOCK_SECONDS,
    LockUnavailableError,
    QueueLock,
    SidecarError,
)
from claude_sidecar.store import Message, QueueFile, StorageUnavailableError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

QUEUE_FILENAME = "queue.json"
LOCK_FILENAME = "queue.lock"


class MessageQueue:
    """FIFO of user feedback messages persisted under ``base_dir``.

    Args:
        base_dir: Storage directory. Defaults to ``default_base_dir()``.
        max_retries: Lock acquisition attempts per operation.
        lock_backoff: Seconds to wait between lock attempts.
        stale_after: Age in seconds after which a lock file is reclaimed.

    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        lock_backoff: float = LOCK_BACKOFF_SECONDS,
        stale_after: float = STALE_LOCK_SECONDS,
    ) -> None:
        """Initialize the queue for a storage directory."""
        self.base_dir = base_dir or default_base_dir()
        self.max_retries = max_retries
        self.store = QueueFile(self.base_dir / QUEUE_FILENAME)
        self.lock = QueueLock(
            self.base_dir / LOCK_FILENAME,
            stale_after=stale_after,
            backoff=lock_backoff,
        )

    @contextlib.contextmanager
    def _locked(self) -> cabc.Iterator[None]:
        self.store.ensure_dir()
        try:
            acquired = self.lock.acquire(self.max_retries)
        except OSError as e:
            msg = f"cannot create queue lock {self.lock.path}: {e}"
            raise StorageUnavailableError(msg) from e
        if not acquired:
            msg = f"could not acquire queue lock: {self.lock.path}"
            raise LockUnavailableError(msg)
        try:
            yield
        finally:
            self.lock.release()

    def enqueue(self, text: str) -> Message:
        """Append a message stamped with the current time.

        Returns:
            The stored message.

        Raises:
            LockUnavailableError: If the lock could not be acquired.
            StorageUnavailableError: If the document could not be written.

        """
        with self._locked():
            msgs = self.store.read()
            msg = Message.create(text)
            msgs.append(msg)
            self.store.write(msgs)
        return msg

    def drain_all(self) -> list[Message]:
        """Remove and return every queued message in insertion order.

        Reading and clearing happen under one lock hold, so concurrent drains
        never both see the same message.
        """
        with self._locked():
            msgs = self.store.read()
            if msgs:
                self.store.write([])
            return msgs

    def peek(self) -> list[Message]:
        """Return every queued message without removing any."""
        with self._locked():
            return self.store.read()

    def size(self) -> int:
        """Best-effort count of queued messages, read without the lock.

        Only suitable for progress display; returns 0 on any failure.
        """
        try:
            return len(self.store.read())
        except SidecarError:
            return 0


def default_base_dir() -> Path:
    """Get default queue storage directory.

    Respects the CLAUDE_SIDECAR_DIR environment variable, then falls back to
    ~/.claude-sidecar.

    Returns:
        Path to queue storage directory.

    """
    if p := os.environ.get("CLAUDE_SIDECAR_DIR"):
        return Path(p).expanduser()
    return Path.home() / ".claude-sidecar"
