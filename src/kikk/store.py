"""On-disk key-value store for the local fallback mode.

Each key maps to one JSON file under the base directory, holding a metadata
envelope and the payload::

    {"meta": {"key": "kikk_observations", "saved_at": "..."}, "data": [...]}

A write always replaces the whole file; there is no partial update. Keys are
fixed identifiers (``kikk_observations``, ``kikk_user_locations``,
``kikk-map-layer``, ``kikk-theme``) and the payloads are versionless, so a
schema change breaks existing local data.

Known limitation: a crash while a file is being written can leave a corrupt
blob behind. That is accepted for single-user, single-device use.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore:
    """Reads and writes whole JSON blobs by key."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir

    def read(self, key: str) -> Any | None:
        """Return the payload stored under ``key``, or None if missing."""
        full = self._resolve(key)
        if not full.exists():
            return None
        with full.open(encoding="utf-8") as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope.get("data")

    def read_raw(self, key: str) -> dict[str, Any] | None:
        """Read the full envelope (meta + data)."""
        full = self._resolve(key)
        if not full.exists():
            return None
        with full.open(encoding="utf-8") as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(self, key: str, data: Any) -> Path:
        """Replace the payload stored under ``key``.

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(key)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {
            "meta": {"key": key, "saved_at": datetime.now(UTC).isoformat()},
            "data": data,
        }
        with full.open("w", encoding="utf-8") as f:
            json.dump(envelope, f, indent=2, ensure_ascii=False)

        return full

    def delete(self, key: str) -> None:
        """Remove the blob for ``key`` if present."""
        self._resolve(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._resolve(key).exists()

    def _resolve(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            msg = f"Invalid store key: {key!r}"
            raise ValueError(msg)
        full = self.base / f"{key}.json"
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Key escapes store base directory: {key}"
            raise ValueError(msg) from None
        return full
