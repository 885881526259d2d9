"""Conflict record and detector protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from precept.artifacts.base import InstructionArtifact


@dataclass(frozen=True)
class Conflict:
    """A possible contradiction between two artifacts.

    ``first`` precedes ``second`` in the resolved order, so ``first`` wins.
    """

    first: InstructionArtifact
    second: InstructionArtifact
    description: str
    detector: str = ""

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.first.id, self.second.id, self.description)

    def to_dict(self) -> dict:
        return {
            "first": self.first.id,
            "second": self.second.id,
            "description": self.description,
            "detector": self.detector,
        }


@runtime_checkable
class ConflictDetector(Protocol):
    """Protocol for pluggable, best-effort contradiction detectors."""

    @property
    def name(self) -> str: ...

    def detect(self, first: InstructionArtifact, second: InstructionArtifact) -> list[str]:
        """Return a description for each contradiction found (empty if none)."""
        ...
