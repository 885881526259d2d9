"""Precedence Resolver: order applicable artifacts by override priority."""

from __future__ import annotations

from collections.abc import Iterable

from precept.artifacts.base import InstructionArtifact
from precept.registry import Registry, version_key


def effective_version(artifact: InstructionArtifact, registry: Registry | None) -> str | None:
    """Registry version first, then the artifact's own frontmatter version."""
    if registry is not None:
        registered = registry.version_of(artifact.id)
        if registered is not None:
            return registered
    return artifact.version


def resolve(
    matched: Iterable[InstructionArtifact],
    registry: Registry | None = None,
) -> list[InstructionArtifact]:
    """Order artifacts: project > language > scenario > prompt, newer first within a tier.

    Python's sort is stable, so artifacts equal on both keys keep their
    input order, and resolving an already resolved list returns it unchanged.
    """
    items = list(matched)
    # Two passes on a stable sort: secondary key first, then primary.
    items.sort(key=lambda a: version_key(effective_version(a, registry)), reverse=True)
    items.sort(key=lambda a: a.rank)
    return items
