"""Artifact Locator: which artifacts apply to an editing context."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable
from pathlib import PurePosixPath

from precept.artifacts.base import InstructionArtifact
from precept.context import Context

logger = logging.getLogger(__name__)

MATCH_ALL = ("**", "**/*", "*")


def glob_matches(pattern: str, file_path: str) -> bool:
    """Match a single ``applyTo`` glob against a relative file path.

    Patterns containing ``/`` match the whole path; others also match the
    basename, so ``*.py`` applies to ``src/app/main.py``. ``**/`` may match
    zero directories.
    """
    if pattern in MATCH_ALL:
        return True
    pattern = pattern.lstrip("/")
    if fnmatch.fnmatchcase(file_path, pattern):
        return True
    if "/" not in pattern:
        return fnmatch.fnmatchcase(PurePosixPath(file_path).name, pattern)
    if pattern.startswith("**/"):
        return glob_matches(pattern[3:], file_path)
    if "/**/" in pattern:
        return fnmatch.fnmatchcase(file_path, pattern.replace("/**/", "/", 1))
    return False


def applies(artifact: InstructionArtifact, context: Context) -> bool:
    """True when the artifact applies to the context."""
    if context.file_path and any(glob_matches(g, context.file_path) for g in artifact.apply_to):
        return True
    if artifact.category == "language" and (
        artifact.language in context.languages or artifact.language in context.frameworks
    ):
        return True
    if artifact.category == "scenario" and artifact.scenario in context.scenarios:
        return True
    return False


def locate(context: Context, artifacts: Iterable[InstructionArtifact]) -> list[InstructionArtifact]:
    """Subset of artifacts applicable to context, in input order.

    Pure: no side effects, and an empty context selects nothing.
    """
    if context.is_empty():
        return []
    matched = [a for a in artifacts if applies(a, context)]
    logger.debug(
        "Located %d artifacts for %s", len(matched), context.file_path or sorted(context.scenarios)
    )
    return matched
