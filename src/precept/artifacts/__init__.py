"""Instruction artifacts: Markdown standards, scenario guides and prompts."""

from precept.artifacts.base import (
    CATEGORIES,
    CATEGORY_RANK,
    Category,
    InstructionArtifact,
    category_rank,
    split_globs,
)
from precept.artifacts.loader import load_artifact, load_artifacts

__all__ = [
    "CATEGORIES",
    "CATEGORY_RANK",
    "Category",
    "InstructionArtifact",
    "category_rank",
    "load_artifact",
    "load_artifacts",
    "split_globs",
]
