"""Instruction artifact types."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

Category = Literal["project", "language", "scenario", "prompt"]

# Lower rank wins: project overrides beat language standards, which beat
# scenario guides, which beat general prompts.
CATEGORY_RANK: dict[str, int] = {
    "project": 0,
    "language": 1,
    "scenario": 2,
    "prompt": 3,
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_RANK)


def category_rank(category: str) -> int:
    """Rank of a category; unknown categories sort after prompts."""
    return CATEGORY_RANK.get(category, len(CATEGORY_RANK))


def split_globs(value: object) -> tuple[str, ...]:
    """Normalize an ``applyTo`` value (comma string or list) to a tuple of globs."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = [str(value)]
    return tuple(g.strip() for g in items if g.strip())


@dataclass(frozen=True)
class InstructionArtifact:
    """A single Markdown instruction, standards or prompt file."""

    id: str
    path: Path
    category: Category
    apply_to: tuple[str, ...] = ()
    body: str = ""
    language: str | None = None
    scenario: str | None = None
    description: str = ""
    version: str | None = None
    metadata: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def rank(self) -> int:
        return category_rank(self.category)

    @property
    def title(self) -> str:
        """First Markdown heading of the body, or the id."""
        for line in self.body.splitlines():
            line = line.strip()
            if line.startswith("#"):
                return line.lstrip("# ").strip() or self.id
        return self.id
