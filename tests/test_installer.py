"""Tests for claude_sidecar installer utilities."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from claude_sidecar.installer.install import (
    HOOK_COMMAND,
    POST_HOOK_COMMAND,
    find_settings_file,
    install,
)
from claude_sidecar.installer.json5_helpers import dumps, loads


def _pre_tool_use(settings: Path) -> list[dict]:
    return json.loads(settings.read_text(encoding="utf-8"))["hooks"]["PreToolUse"]


def test_find_settings_file_uses_xdg_config_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """find_settings_file should honor XDG_CONFIG_HOME when present."""
    xdg_config = tmp_path / "xdg"
    settings = xdg_config / "claude" / "settings.json"
    settings.parent.mkdir(parents=True)
    settings.write_text("{}", encoding="utf-8")

    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_config))

    assert find_settings_file() == settings, "should return XDG settings.json"


def test_find_settings_file_defaults_to_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """find_settings_file falls back to ~/.claude/settings.json."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

    assert find_settings_file() == tmp_path / ".claude" / "settings.json"


def test_install_creates_settings_file(tmp_path: Path) -> None:
    """Install creates the settings file and its directory when missing."""
    settings = tmp_path / ".claude" / "settings.json"

    assert install(settings_path=settings) == 0

    assert _pre_tool_use(settings) == [
        {"matcher": "*", "hooks": [{"type": "command", "command": HOOK_COMMAND}]}
    ]


def test_install_is_idempotent(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A second install detects the hook and leaves the file alone."""
    settings = tmp_path / "settings.json"
    assert install(settings_path=settings) == 0
    before = settings.read_text(encoding="utf-8")
    capsys.readouterr()

    assert install(settings_path=settings) == 0

    assert "already configured" in capsys.readouterr().out
    assert settings.read_text(encoding="utf-8") == before
    assert not list(tmp_path.glob("settings.backup.*.json")), "no write, no backup"


def test_install_extends_existing_wildcard_matcher(tmp_path: Path) -> None:
    """The hook joins an existing "*" matcher instead of duplicating it."""
    settings = tmp_path / "settings.json"
    other = {"type": "command", "command": "other-hook"}
    settings.write_text(
        json.dumps(
            {
                "model": "opus",
                "hooks": {"PreToolUse": [{"matcher": "*", "hooks": [other]}]},
            }
        ),
        encoding="utf-8",
    )

    assert install(settings_path=settings) == 0

    data = json.loads(settings.read_text(encoding="utf-8"))
    assert data["model"] == "opus", "unrelated settings are preserved"
    assert data["hooks"]["PreToolUse"] == [
        {
            "matcher": "*",
            "hooks": [other, {"type": "command", "command": HOOK_COMMAND}],
        }
    ]
    assert list(tmp_path.glob("settings.backup.*.json")), "backup is created"


def test_install_accepts_json5(tmp_path: Path) -> None:
    """Comments and trailing commas in settings.json are tolerated."""
    settings = tmp_path / "settings.json"
    settings.write_text(
        '{\n  // user comment\n  "hooks": {},\n}\n', encoding="utf-8"
    )

    assert install(settings_path=settings) == 0
    assert _pre_tool_use(settings)[0]["matcher"] == "*"


def test_install_post_variant(tmp_path: Path) -> None:
    """--post registers the PostToolUse command."""
    settings = tmp_path / "settings.json"

    assert install(settings_path=settings, post=True) == 0

    data = json.loads(settings.read_text(encoding="utf-8"))
    assert "PreToolUse" not in data["hooks"]
    hooks = data["hooks"]["PostToolUse"][0]["hooks"]
    assert hooks == [{"type": "command", "command": POST_HOOK_COMMAND}]


def test_install_dry_run_writes_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Dry-run reports the change without touching disk."""
    settings = tmp_path / "settings.json"
    settings.write_text("{}", encoding="utf-8")

    assert install(settings_path=settings, dry_run=True) == 0

    assert "[DRY RUN]" in capsys.readouterr().out
    assert settings.read_text(encoding="utf-8") == "{}"


def test_install_rejects_bad_hooks_shape(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A non-object hooks entry is an error."""
    settings = tmp_path / "settings.json"
    settings.write_text('{"hooks": []}', encoding="utf-8")

    assert install(settings_path=settings) == 1
    assert "hooks must be an object" in capsys.readouterr().err


def test_install_rejects_unparsable_settings(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Garbage settings are reported, not overwritten."""
    settings = tmp_path / "settings.json"
    settings.write_text("{ not json", encoding="utf-8")

    assert install(settings_path=settings) == 1
    assert "Error parsing settings.json" in capsys.readouterr().err
    assert settings.read_text(encoding="utf-8") == "{ not json"


def test_json5_loads_blank_is_empty() -> None:
    """Blank settings parse as an empty object."""
    assert loads("  \n") == {}


def test_json5_dumps_round_trips() -> None:
    """Dumped settings parse back to the same data."""
    data = {"hooks": {"PreToolUse": []}, "name": "ünïcode"}
    assert loads(dumps(data)) == data
