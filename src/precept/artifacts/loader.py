"""Load instruction artifacts from the copilot/ directory convention.

Layout:
    copilot/
    ├── instructions/
    │   ├── languages/{language}/*.md     # language standards
    │   └── scenarios/**/*.md             # CI/CD and other scenario guides
    ├── prompts/**/*.md                   # general prompt templates
    └── project/**/*.md                   # project-specific overrides

Markdown files are the source of truth. Selection metadata (``applyTo``,
``version``, ``description``) comes from YAML frontmatter.
"""

from __future__ import annotations

import logging
from pathlib import Path

import frontmatter

from precept.artifacts.base import CATEGORIES, InstructionArtifact, split_globs
from precept.context import extensions_for
from precept.errors import DuplicateArtifactError

logger = logging.getLogger(__name__)

LANGUAGES_DIR = Path("instructions") / "languages"
SCENARIOS_DIR = Path("instructions") / "scenarios"
PROMPTS_DIR = Path("prompts")
PROJECT_DIR = Path("project")


def artifact_id(copilot_dir: Path, path: Path) -> str:
    """Id derived from the path under copilot/, without suffix, with / separators."""
    rel = path.relative_to(copilot_dir).with_suffix("")
    parts = rel.parts
    if parts[:1] == ("instructions",):
        parts = parts[1:]
    return "/".join(parts)


def _classify(copilot_dir: Path, path: Path) -> tuple[str, str | None, str | None] | None:
    """Return (category, language, scenario) from where the file sits."""
    rel = path.relative_to(copilot_dir)
    parts = rel.parts
    if rel.is_relative_to(LANGUAGES_DIR) and len(parts) == 4:
        return "language", parts[2], None
    if rel.is_relative_to(SCENARIOS_DIR) and len(parts) >= 3:
        scenario = parts[2] if len(parts) > 3 else Path(parts[2]).stem
        return "scenario", None, scenario
    if rel.is_relative_to(PROMPTS_DIR):
        return "prompt", None, None
    if rel.is_relative_to(PROJECT_DIR):
        return "project", None, None
    return None


def load_artifact(copilot_dir: Path, path: Path) -> InstructionArtifact | None:
    """Parse one Markdown file. Returns None for files outside the convention.

    A file declaring ``category: project`` is a project override wherever it sits.
    """
    try:
        post = frontmatter.load(str(path))
    except Exception as e:
        logger.warning("Skipping unreadable artifact %s: %s", path, e)
        return None

    meta = dict(post.metadata)
    located = _classify(copilot_dir, path)
    if located is None and meta.get("category") == "project":
        located = ("project", None, None)
    if located is None:
        logger.debug("Ignoring file outside the directory convention: %s", path)
        return None
    category, language, scenario = located

    declared = meta.get("category")
    if declared == "project":
        category = "project"
    elif declared and declared != category:
        logger.warning(
            "%s declares category '%s' but sits in a %s directory; using %s",
            path, declared, category, category,
        )

    apply_to = split_globs(meta.get("applyTo"))
    if not apply_to:
        if language:
            apply_to = extensions_for(language)
        elif category in ("project", "prompt"):
            apply_to = ("**",)

    version = meta.get("version")
    return InstructionArtifact(
        id=str(meta.get("id") or artifact_id(copilot_dir, path)),
        path=path,
        category=category,
        apply_to=apply_to,
        body=post.content,
        language=language,
        scenario=scenario,
        description=str(meta.get("description", "")),
        version=str(version) if version is not None else None,
        metadata=meta,
    )


def load_artifacts(copilot_dir: Path) -> list[InstructionArtifact]:
    """Scan copilot_dir once and return every artifact in a stable (sorted path) order."""
    if not copilot_dir.is_dir():
        logger.info("No instruction directory at %s", copilot_dir)
        return []

    artifacts: list[InstructionArtifact] = []
    seen: dict[str, Path] = {}
    for md_file in sorted(copilot_dir.rglob("*.md")):
        artifact = load_artifact(copilot_dir, md_file)
        if artifact is None:
            continue
        if artifact.id in seen:
            raise DuplicateArtifactError(artifact.id, str(seen[artifact.id]), str(md_file))
        seen[artifact.id] = md_file
        artifacts.append(artifact)

    counts = {c: sum(1 for a in artifacts if a.category == c) for c in CATEGORIES}
    logger.info(
        "Loaded %d artifacts from %s (%s)",
        len(artifacts),
        copilot_dir,
        ", ".join(f"{c}={n}" for c, n in counts.items()),
    )
    return artifacts
