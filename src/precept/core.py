"""Precept pipeline: locate → order → flag conflicts → render.

Responsibilities:
1. Load artifacts from the project's copilot/ tree (once, read-only after)
2. Locate artifacts that apply to a Context
3. Order them by precedence using the explicit Registry
4. Optionally scan the ordered sequence for conflicts
5. Assemble a Markdown context block for an AI assistant
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from precept.artifacts.base import InstructionArtifact
from precept.artifacts.loader import load_artifacts
from precept.config import PreceptConfig
from precept.conflicts.base import Conflict, ConflictDetector
from precept.conflicts.logger import ConflictLogger
from precept.context import Context
from precept.locator import locate
from precept.registry import Registry
from precept.resolver import effective_version, resolve

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of one resolution pass."""

    context: Context
    artifacts: list[InstructionArtifact] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)

    @property
    def ids(self) -> list[str]:
        return [a.id for a in self.artifacts]


class Precept:
    """Resolves applicable instructions for editing contexts."""

    def __init__(
        self,
        config: PreceptConfig,
        registry: Registry,
        detectors: list[ConflictDetector] | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.conflict_logger = ConflictLogger(detectors, log_path=config.conflict_log_path)
        self._artifacts: list[InstructionArtifact] = []

    @classmethod
    def from_config(cls, config: PreceptConfig) -> Precept:
        """Load registry and artifacts as configured."""
        precept = cls(config, Registry.load(config.registry_path))
        precept.load()
        return precept

    # ── Artifacts ────────────────────────────────────────────

    def load(self) -> list[InstructionArtifact]:
        self._artifacts = load_artifacts(self.config.copilot_dir)
        return self._artifacts

    def set_artifacts(self, artifacts: list[InstructionArtifact]) -> None:
        self._artifacts = list(artifacts)

    @property
    def artifacts(self) -> list[InstructionArtifact]:
        return list(self._artifacts)

    def version_of(self, artifact: InstructionArtifact) -> str | None:
        return effective_version(artifact, self.registry)

    # ── Resolution ───────────────────────────────────────────

    def applicable(self, context: Context, *, detect_conflicts: bool | None = None) -> Resolution:
        """Run locate → resolve → (optionally) conflict scan for one context."""
        matched = locate(context, self._artifacts)
        ordered = resolve(matched, self.registry)

        if detect_conflicts is None:
            detect_conflicts = self.config.resolution.detect_conflicts
        conflicts = (
            self.conflict_logger.scan(ordered, same_context=True) if detect_conflicts else []
        )

        logger.info(
            "Resolved %d/%d artifacts for %s (%d conflicts)",
            len(ordered),
            len(self._artifacts),
            context.file_path or ",".join(sorted(context.scenarios)) or "<empty>",
            len(conflicts),
        )
        return Resolution(context=context, artifacts=ordered, conflicts=conflicts)

    # ── Rendering ────────────────────────────────────────────

    def render(self, resolution: Resolution) -> str:
        """Assemble the ordered artifacts into one Markdown context block."""
        parts: list[str] = []
        for artifact in resolution.artifacts:
            version = self.version_of(artifact)
            header = f"## {artifact.id} ({artifact.category})"
            if version:
                header += f" v{version}"
            body = artifact.body.strip()
            parts.append(f"{header}\n\n{body}" if body else header)

        if resolution.conflicts:
            table = "## Conflicts (earlier entry wins)\n\n"
            table += "| Wins | Overridden | Description |\n|------|------------|-------------|\n"
            for c in resolution.conflicts:
                description = c.description.replace("|", "\\|")
                table += f"| {c.first.id} | {c.second.id} | {description} |\n"
            parts.append(table.rstrip())

        context = "\n\n---\n\n".join(parts) if parts else ""
        limit = self.config.resolution.context_warn_chars
        if len(context) > limit:
            logger.warning("Instruction context is %d chars (threshold: %d)", len(context), limit)
        return context
