"""Exclusive-create lock file guarding the queue document.

The lock is a plain file created with ``O_CREAT | O_EXCL``; its existence
means the queue is held. A holder that crashes leaves the file behind, so any
lock whose modification time is older than ``STALE_LOCK_SECONDS`` is reclaimed
by the next acquirer. A slow but live holder can therefore lose its lock; that
is accepted in exchange for never deadlocking on a dead one.

Reclaiming renames the stale file to a unique name before deleting it, then
re-checks the age of what it claimed. If two acquirers raced and the rename
grabbed a lock that had just been created, the file is linked back into
place. A third process creating the lock inside that short window can still
end up sharing it with the restored holder.

Examples
--------
Guard a read-modify-write cycle::

    from claude_sidecar.lock import QueueLock

    lock = QueueLock(Path("~/.claude-sidecar/queue.lock").expanduser())
    if lock.acquire():
        try:
            ...
        finally:
            lock.release()

"""

from __future__ import annotations

import contextlib
import logging
import os
import time
import typing as typ
import uuid

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

STALE_LOCK_SECONDS = 5.0
LOCK_BACKOFF_SECONDS = 0.05
DEFAULT_MAX_RETRIES = 20


class SidecarError(Exception):
    """Base class for queue failures surfaced to callers."""


class LockUnavailableError(SidecarError):
    """Raised when the queue lock cannot be acquired within the retry budget."""


class QueueLock:
    """Advisory lock backed by an exclusively created file.

    Parameters
    ----------
    path : Path
        Location of the lock file. Its parent directory must exist.
    stale_after : float, optional
        Age in seconds after which an existing lock file is presumed abandoned.
    backoff : float, optional
        Delay in seconds between acquisition attempts.

    """

    def __init__(
        self,
        path: Path,
        *,
        stale_after: float = STALE_LOCK_SECONDS,
        backoff: float = LOCK_BACKOFF_SECONDS,
    ) -> None:
        """Initialize the lock for ``path``."""
        self.path = path
        self.stale_after = stale_after
        self.backoff = backoff

    def is_stale(self) -> bool:
        """Return True if a lock file exists and is older than the threshold."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return False
        return time.time() - mtime > self.stale_after

    def _reclaim_if_stale(self) -> None:
        if not self.is_stale():
            return
        claimed = self.path.with_name(
            f"{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.stale"
        )
        try:
            self.path.rename(claimed)
        except OSError:
            # Another acquirer reclaimed it first.
            return
        try:
            if time.time() - claimed.stat().st_mtime <= self.stale_after:
                # A fresh lock replaced the stale one before our rename; put it
                # back unless someone has already created a new one.
                with contextlib.suppress(OSError):
                    os.link(claimed, self.path)
                return
            logger.info("reclaimed stale queue lock %s", self.path)
        finally:
            with contextlib.suppress(OSError):
                claimed.unlink()

    def _try_create(self) -> bool:
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(os.getpid()))
        return True

    def acquire(self, max_retries: int = DEFAULT_MAX_RETRIES) -> bool:
        """Try to take the lock, retrying with a fixed backoff.

        Parameters
        ----------
        max_retries : int, optional
            Number of create attempts before giving up.

        Returns
        -------
        bool
            True once the lock file was created by this call, False if every
            attempt found it held.

        Raises
        ------
        OSError
            If the lock file cannot be created for a reason other than it
            already existing (missing directory, permissions).

        """
        for attempt in range(max_retries):
            self._reclaim_if_stale()
            if self._try_create():
                return True
            if attempt < max_retries - 1:
                time.sleep(self.backoff)
        logger.warning(
            "queue lock %s still held after %d attempts", self.path, max_retries
        )
        return False

    def release(self) -> None:
        """Delete the lock file. Releasing an absent lock is a no-op."""
        self.path.unlink(missing_ok=True)
