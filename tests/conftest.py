"""Pytest configuration and fixtures for claude-sidecar tests."""

from __future__ import annotations

from pathlib import (
    Path,  # noqa: TC003  # Path required at runtime for fixture hints.
)

import pytest

from claude_sidecar.core import MessageQueue


@pytest.fixture
def tmp_queue_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for queue storage.

    The directory is not created; the queue creates it on first use.

    Parameters
    ----------
    tmp_path : Path
        pytest ``tmp_path`` fixture.

    Returns
    -------
    Path
        Path to temporary queue directory.

    """
    return tmp_path / "sidecar"


@pytest.fixture
def message_queue(tmp_queue_dir: Path) -> MessageQueue:
    """Provide a MessageQueue bound to temporary storage.

    Parameters
    ----------
    tmp_queue_dir : Path
        Temporary queue directory fixture.

    Returns
    -------
    MessageQueue
        Queue instance for testing.

    """
    return MessageQueue(tmp_queue_dir)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real per-user queue and log settings."""
    monkeypatch.setenv("CLAUDE_SIDECAR_DIR", str(tmp_path / "default-sidecar"))
    monkeypatch.delenv("CLAUDE_SIDECAR_LOG_FILE", raising=False)
    monkeypatch.delenv("CLAUDE_SIDECAR_LOG_LEVEL", raising=False)
