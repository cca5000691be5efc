"""CLI entry points for claude-sidecar.

Provides the console-script entry point for the ``claude-sidecar`` command.

Examples
--------
Invoke the CLI entry point directly::

    from claude_sidecar.cli import main

    main()

Run the CLI from the command line (via console scripts)::

    claude-sidecar --help
    claude-sidecar start

"""

from __future__ import annotations

from claude_sidecar.cli.app import app, main

__all__ = ["app", "main"]
