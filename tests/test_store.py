"""Tests for claude_sidecar.store module."""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest

from claude_sidecar.store import Message, QueueFile


@pytest.fixture
def queue_file(tmp_path: Path) -> QueueFile:
    """Provide a QueueFile inside a not-yet-created directory."""
    return QueueFile(tmp_path / "store" / "queue.json")


def test_read_missing_file_is_empty(queue_file: QueueFile) -> None:
    """An absent document reads as an empty queue."""
    assert queue_file.read() == []


def test_write_creates_directory(queue_file: QueueFile) -> None:
    """The storage directory is created on first write."""
    queue_file.write([Message("hello", "2024-01-01T00:00:00.000+00:00")])
    assert queue_file.path.exists()


def test_write_then_read_preserves_order(queue_file: QueueFile) -> None:
    """Messages come back in the order written."""
    msgs = [Message(f"m{i}", f"2024-01-01T00:00:0{i}.000+00:00") for i in range(3)]
    queue_file.write(msgs)
    assert queue_file.read() == msgs


def test_document_is_pretty_printed_json_array(queue_file: QueueFile) -> None:
    """The on-disk format is an indented JSON list of text/timestamp objects."""
    queue_file.write([Message("Hello", "2024-01-01T00:00:00.000+00:00")])

    raw = queue_file.path.read_text(encoding="utf-8")
    assert raw.endswith("\n")
    assert '\n  {\n    "text": "Hello"' in raw
    assert json.loads(raw) == [
        {"text": "Hello", "timestamp": "2024-01-01T00:00:00.000+00:00"}
    ]


def test_write_replaces_contents(queue_file: QueueFile) -> None:
    """Each write fully replaces the previous document."""
    queue_file.write([Message("a", ""), Message("b", "")])
    queue_file.write([])
    assert queue_file.read() == []
    assert json.loads(queue_file.path.read_text(encoding="utf-8")) == []


def test_write_leaves_no_temp_files(queue_file: QueueFile) -> None:
    """Atomic writes clean up their temporary files."""
    queue_file.write([Message("a", "")])
    leftovers = [p.name for p in queue_file.path.parent.iterdir()]
    assert leftovers == ["queue.json"]


@pytest.mark.parametrize(
    "content",
    [
        "invalid json",
        "",
        "   \n",
        '{"text": "not a list"}',
        "42",
        "[1, 2",
        "[" * 100000,
        "[" + "1" * 5000 + "]",
    ],
    ids=[
        "garbage",
        "empty",
        "blank",
        "object",
        "number",
        "truncated",
        "deep-nesting",
        "huge-integer",
    ],
)
def test_corrupt_document_reads_empty(queue_file: QueueFile, content: str) -> None:
    """Unparsable or wrongly shaped content is treated as an empty queue."""
    queue_file.ensure_dir()
    queue_file.path.write_text(content, encoding="utf-8")
    assert queue_file.read() == []


def test_non_utf8_document_reads_empty(queue_file: QueueFile) -> None:
    """Undecodable bytes are treated as an empty queue."""
    queue_file.ensure_dir()
    queue_file.path.write_bytes(b"\xff\xfe\x00garbage")
    assert queue_file.read() == []


def test_malformed_entries_are_skipped(queue_file: QueueFile) -> None:
    """Entries without a string text are dropped; missing timestamps become ''."""
    queue_file.ensure_dir()
    queue_file.path.write_text(
        json.dumps(
            [
                {"text": "keep", "timestamp": "t1"},
                "stray string",
                {"timestamp": "t2"},
                {"text": 7},
                {"text": "no time"},
            ]
        ),
        encoding="utf-8",
    )
    assert queue_file.read() == [Message("keep", "t1"), Message("no time", "")]


def test_unicode_round_trip(queue_file: QueueFile) -> None:
    """Non-ASCII text is stored readably and read back intact."""
    text = "Hello 世界 🌍"
    queue_file.write([Message(text, "")])
    assert text in queue_file.path.read_text(encoding="utf-8")
    assert queue_file.read()[0].text == text


def test_message_create_stamps_utc_time() -> None:
    """New messages carry a parseable UTC ISO-8601 timestamp."""
    before = dt.datetime.now(tz=dt.UTC).replace(microsecond=0)
    msg = Message.create("hi")
    stamp = dt.datetime.fromisoformat(msg.timestamp)
    assert msg.text == "hi"
    assert stamp.utcoffset() == dt.timedelta(0)
    assert stamp >= before
