"""Version registry for imported instruction artifacts.

Stored as ``.copilot/registry.json``:

    {
      "schema": 1,
      "artifacts": {
        "languages/python/standards": {
          "version": "1.4.0",
          "source": "/path/to/library/copilot/...",
          "imported_at": "2026-02-18T10:00:00",
          "updated_at": "2026-02-18T10:00:00"
        }
      }
    }

The registry is an explicit object: callers load it, pass it into the
resolver and importer, and save it. There is no module-level instance.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from precept.errors import RegistryError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_COMPONENT_RE = re.compile(r"(\d+)|([^\d.\-+_]+)")
# Above any text component, below any number
_RELEASE_END = (0, 1, "")


def version_key(version: str | None) -> tuple:
    """Sortable key for a version string; larger means newer.

    Dotted numeric components compare numerically (``1.10`` > ``1.9``).
    A leading ``v`` is ignored. Text components (``rc``, ``beta``) sort
    below numbers at the same position, and the end of the string sorts
    between the two, so ``1.0rc1`` < ``1.0`` < ``1.0.1``. A missing version
    is the oldest possible.
    """
    if version is None or not str(version).strip():
        return (0,)
    text_version = str(version).strip().lower()
    if text_version.startswith("v") and text_version[1:2].isdigit():
        text_version = text_version[1:]
    parts: list[tuple[int, int, str]] = []
    for number, text in _COMPONENT_RE.findall(text_version):
        if number:
            parts.append((1, int(number), ""))
        else:
            parts.append((0, 0, text))
    parts.append(_RELEASE_END)
    return (1, tuple(parts))


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class RegistryEntry:
    """Version bookkeeping for one artifact."""

    version: str
    source: str = ""
    imported_at: str = ""
    updated_at: str = ""


class Registry:
    """Mapping of artifact id → version metadata."""

    def __init__(self, path: Path | None = None, entries: dict[str, RegistryEntry] | None = None) -> None:
        self.path = path
        self._entries: dict[str, RegistryEntry] = dict(entries or {})

    # ── Persistence ───────────────────────────────────────────

    @classmethod
    def load(cls, path: Path) -> Registry:
        """Read the registry file. A missing file is an empty registry."""
        if not path.exists():
            logger.debug("No registry at %s, starting empty", path)
            return cls(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryError(f"Cannot read registry {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("artifacts", {}), dict):
            raise RegistryError(f"Malformed registry {path}: expected an 'artifacts' object")
        schema = data.get("schema", SCHEMA_VERSION)
        if schema != SCHEMA_VERSION:
            raise RegistryError(f"Unsupported registry schema {schema!r} in {path}")

        entries: dict[str, RegistryEntry] = {}
        for artifact_id, raw in data.get("artifacts", {}).items():
            if isinstance(raw, str):
                # bare id → version mapping
                entries[artifact_id] = RegistryEntry(version=raw)
            elif isinstance(raw, dict) and "version" in raw:
                entries[artifact_id] = RegistryEntry(
                    version=str(raw["version"]),
                    source=raw.get("source", ""),
                    imported_at=raw.get("imported_at", ""),
                    updated_at=raw.get("updated_at", ""),
                )
            else:
                raise RegistryError(f"Malformed registry entry '{artifact_id}' in {path}")
        logger.debug("Loaded registry with %d entries from %s", len(entries), path)
        return cls(path, entries)

    def save(self, path: Path | None = None) -> Path:
        """Write the registry atomically. Returns the path written."""
        target = path or self.path
        if target is None:
            raise RegistryError("Registry has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "schema": SCHEMA_VERSION,
            "artifacts": {k: asdict(v) for k, v in sorted(self._entries.items())},
        }
        fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".registry-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        self.path = target
        logger.info("Saved registry (%d entries) to %s", len(self._entries), target)
        return target

    # ── Lifecycle ─────────────────────────────────────────────

    def record_import(self, artifact_id: str, version: str, source: str = "") -> RegistryEntry:
        """Register a newly imported artifact. Ids must be unique."""
        if artifact_id in self._entries:
            raise RegistryError(
                f"Artifact '{artifact_id}' is already registered; refresh it instead"
            )
        ts = _now()
        entry = RegistryEntry(version=str(version), source=source, imported_at=ts, updated_at=ts)
        self._entries[artifact_id] = entry
        logger.info("Registered %s @ %s", artifact_id, version)
        return entry

    def record_refresh(self, artifact_id: str, version: str, source: str | None = None) -> RegistryEntry:
        """Update the version of an already imported artifact."""
        entry = self._entries.get(artifact_id)
        if entry is None:
            raise RegistryError(f"Artifact '{artifact_id}' is not registered")
        previous = entry.version
        entry.version = str(version)
        if source is not None:
            entry.source = source
        entry.updated_at = _now()
        logger.info("Refreshed %s: %s → %s", artifact_id, previous, version)
        return entry

    def remove(self, artifact_id: str) -> None:
        if self._entries.pop(artifact_id, None) is None:
            logger.warning("Artifact %s not registered, nothing to remove", artifact_id)

    # ── Queries ───────────────────────────────────────────────

    def get(self, artifact_id: str) -> RegistryEntry | None:
        return self._entries.get(artifact_id)

    def version_of(self, artifact_id: str) -> str | None:
        entry = self._entries.get(artifact_id)
        return entry.version if entry else None

    def __contains__(self, artifact_id: object) -> bool:
        return artifact_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(sorted(self._entries))

    def items(self) -> list[tuple[str, RegistryEntry]]:
        return sorted(self._entries.items())
