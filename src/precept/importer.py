"""Import and refresh artifacts from a shared instruction library."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from precept.artifacts.base import InstructionArtifact
from precept.artifacts.loader import load_artifact, load_artifacts
from precept.errors import ArtifactError
from precept.registry import Registry, version_key

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0"


@dataclass
class ImportReport:
    """Ids touched by an import or refresh pass."""

    imported: list[str] = field(default_factory=list)
    refreshed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{len(self.imported)} imported, {len(self.refreshed)} refreshed, "
            f"{len(self.skipped)} skipped"
        )


def _library_artifacts(library_copilot: Path, only: Iterable[str] | None) -> list[InstructionArtifact]:
    wanted = set(only) if only else None
    artifacts = load_artifacts(library_copilot)
    if wanted is not None:
        missing = wanted - {a.id for a in artifacts}
        if missing:
            raise ArtifactError(f"Not found in library: {', '.join(sorted(missing))}")
        artifacts = [a for a in artifacts if a.id in wanted]
    return artifacts


def _is_override(artifact: InstructionArtifact) -> bool:
    return artifact.category == "project"


def _is_local_override(
    library_copilot: Path, project_copilot: Path, artifact: InstructionArtifact
) -> bool:
    """Whether the project's copy of this artifact was promoted to an override."""
    target = project_copilot / artifact.path.relative_to(library_copilot)
    if not target.is_file():
        return False
    local = load_artifact(project_copilot, target)
    return local is not None and _is_override(local)


def _copy(library_copilot: Path, project_copilot: Path, artifact: InstructionArtifact) -> Path:
    target = project_copilot / artifact.path.relative_to(library_copilot)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(artifact.path, target)
    except OSError as e:
        raise ArtifactError(f"Cannot copy {artifact.path} → {target}: {e}") from e
    return target


def import_library(
    library_copilot: Path,
    project_copilot: Path,
    registry: Registry,
    *,
    only: Iterable[str] | None = None,
) -> ImportReport:
    """Copy library artifacts into the project and register their versions.

    Already registered ids are skipped; use ``refresh_library`` to update them.
    Project overrides in the library are not imported, and a local file
    promoted to an override is left alone.
    """
    report = ImportReport()
    for artifact in _library_artifacts(library_copilot, only):
        if _is_override(artifact):
            logger.debug("Not importing library project override %s", artifact.id)
            report.skipped.append(artifact.id)
            continue
        if artifact.id in registry:
            logger.info("Already imported: %s (use refresh)", artifact.id)
            report.skipped.append(artifact.id)
            continue
        if _is_local_override(library_copilot, project_copilot, artifact):
            logger.info("Keeping local project override: %s", artifact.id)
            report.skipped.append(artifact.id)
            continue
        _copy(library_copilot, project_copilot, artifact)
        registry.record_import(
            artifact.id, artifact.version or DEFAULT_VERSION, source=str(artifact.path)
        )
        report.imported.append(artifact.id)

    logger.info("Import from %s: %s", library_copilot, report.summary())
    return report


def refresh_library(
    library_copilot: Path,
    project_copilot: Path,
    registry: Registry,
    *,
    only: Iterable[str] | None = None,
) -> ImportReport:
    """Re-copy registered artifacts whose library version is newer.

    Project overrides (``category: project`` on either side) are never
    overwritten.
    """
    report = ImportReport()
    for artifact in _library_artifacts(library_copilot, only):
        if (
            artifact.id not in registry
            or _is_override(artifact)
            or _is_local_override(library_copilot, project_copilot, artifact)
        ):
            report.skipped.append(artifact.id)
            continue
        current = registry.version_of(artifact.id)
        latest = artifact.version or DEFAULT_VERSION
        if version_key(latest) <= version_key(current):
            logger.debug("%s is up to date (%s)", artifact.id, current)
            report.skipped.append(artifact.id)
            continue
        _copy(library_copilot, project_copilot, artifact)
        registry.record_refresh(artifact.id, latest, source=str(artifact.path))
        report.refreshed.append(artifact.id)

    logger.info("Refresh from %s: %s", library_copilot, report.summary())
    return report
