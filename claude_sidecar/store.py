"""On-disk storage for the message queue document.

The queue is a single pretty-printed JSON array of ``{"text", "timestamp"}``
objects. ``QueueFile`` never locks; callers hold ``QueueLock`` around any
read-modify-write cycle.
"""

from __future__ import annotations

import contextlib
import dataclasses
import datetime as dt
import json
import logging
import os
import tempfile
import typing as typ
from pathlib import Path

from claude_sidecar.lock import SidecarError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


class StorageUnavailableError(SidecarError):
    """Raised when the queue directory or document cannot be accessed."""


def utc_now_iso() -> str:
    """Return current UTC time as ISO 8601 string with millisecond precision."""
    return dt.datetime.now(tz=dt.UTC).isoformat(timespec="milliseconds")


@dataclasses.dataclass(frozen=True)
class Message:
    """A queued piece of user feedback."""

    text: str
    timestamp: str

    @classmethod
    def create(cls, text: str) -> Message:
        """Build a message stamped with the current time."""
        return cls(text=text, timestamp=utc_now_iso())

    @classmethod
    def from_dict(cls, data: typ.Any) -> Message | None:  # noqa: ANN401
        """Build a message from a decoded JSON entry, or None if malformed."""
        if not isinstance(data, dict):
            return None
        text = data.get("text")
        if not isinstance(text, str):
            return None
        timestamp = data.get("timestamp")
        if not isinstance(timestamp, str):
            timestamp = ""
        return cls(text=text, timestamp=timestamp)

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-serialisable form."""
        return {"text": self.text, "timestamp": self.timestamp}


class QueueFile:
    """Reads and replaces the queue document at ``path``.

    Args:
        path: Location of the queue document.

    """

    def __init__(self, path: Path) -> None:
        """Initialize queue file storage."""
        self.path = path

    def ensure_dir(self) -> None:
        """Create the storage directory if needed, with restricted permissions.

        Raises:
            StorageUnavailableError: If the directory cannot be created.

        """
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"cannot create queue directory {directory}: {e}"
            raise StorageUnavailableError(msg) from e
        # Best-effort permissions tightening; don't explode on weird FS.
        with contextlib.suppress(OSError):
            directory.chmod(0o700)

    def read(self) -> list[Message]:
        """Load all messages.

        A missing, blank or unparsable document reads as an empty queue.

        Returns:
            Messages in insertion order.

        Raises:
            StorageUnavailableError: If the file exists but cannot be read.

        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError:
            logger.warning("queue document %s is not UTF-8; treated as empty", self.path)
            return []
        except OSError as e:
            msg = f"cannot read queue document {self.path}: {e}"
            raise StorageUnavailableError(msg) from e

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            # JSONDecodeError, oversized integer literals and runaway nesting.
            logger.warning("queue document %s is corrupt; treating as empty", self.path)
            return []
        if not isinstance(data, list):
            logger.warning("queue document %s is not a list; treating as empty", self.path)
            return []

        out: list[Message] = []
        for entry in data:
            msg = Message.from_dict(entry)
            if msg is not None:
                out.append(msg)
        return out

    def write(self, messages: cabc.Sequence[Message]) -> None:
        """Replace the document with ``messages``.

        The new content is written to a temporary file in the same directory
        and moved into place, so readers never see a partial document.

        Raises:
            StorageUnavailableError: If the document cannot be written.

        """
        self.ensure_dir()
        payload = [m.to_dict() for m in messages]
        try:
            tmp_fd, tmp_name = tempfile.mkstemp(
                prefix=self.path.name + ".",
                suffix=".tmp",
                dir=str(self.path.parent),
            )
        except OSError as e:
            msg = f"cannot write queue document {self.path}: {e}"
            raise StorageUnavailableError(msg) from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            with contextlib.suppress(OSError):
                tmp_path.chmod(0o600)
            tmp_path.replace(self.path)
        except OSError as e:
            msg = f"cannot write queue document {self.path}: {e}"
            raise StorageUnavailableError(msg) from e
        finally:
            # If replace failed, try to clean up.
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
