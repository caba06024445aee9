"""JSON encoding of runtime snapshots.

The core never touches the filesystem on its own; these helpers are for
hosts (the CLI and the MCP server) that keep a save file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def dumps(snapshot: dict) -> str:
    return json.dumps(snapshot, indent=2, sort_keys=True)


def loads(text: str) -> dict:
    """Decode a snapshot. Unreadable text yields an empty snapshot."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Save data is not valid JSON (%s), starting fresh", exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Save data is not an object, starting fresh")
        return {}
    return data


def save_file(snapshot: dict, path: str | Path) -> None:
    with open(str(path), "w") as f:
        f.write(dumps(snapshot))


def load_file(path: str | Path) -> dict:
    """Read a save file. A missing file yields an empty snapshot."""
    p = Path(path)
    if not p.exists():
        return {}
    with open(str(p)) as f:
        return loads(f.read())
