"""Helper wrappers around json5kit for Claude Code settings files.

Claude Code tolerates comments and trailing commas in ``settings.json``, so it
is parsed as JSON5 and written back as normalised JSON.

Examples
--------
Round-trip settings content::

    settings = loads('{"hooks": {},}')
    content = dumps(settings)

"""

from __future__ import annotations

import json
import typing as typ

import json5kit


def loads(source: str) -> dict[str, typ.Any]:
    """Parse JSON5 settings into a dictionary.

    Blank input is an empty settings object.

    Raises
    ------
    ValueError
        If the source is not a JSON5 object.

    """
    if not source.strip():
        return {}
    parsed = json5kit.parse(source)
    data = json.loads(parsed.to_json())
    if not isinstance(data, dict):
        msg = "settings must be a JSON object"
        raise ValueError(msg)  # noqa: TRY004
    return data


def dumps(data: dict[str, typ.Any]) -> str:
    """Serialize settings with stable two-space formatting."""
    source = json.dumps(data, indent=2, ensure_ascii=False)
    return json5kit.parse(source).to_source() + "\n"
