"""Claude Code hook for claude-sidecar.

The dispatcher drains queued feedback at a tool checkpoint and reports it to
Claude Code through the exit code and output stream that checkpoint expects.
"""

from __future__ import annotations
