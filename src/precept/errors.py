"""Exception hierarchy shared by all precept components."""

from __future__ import annotations


class PreceptError(Exception):
    """Base class for errors surfaced to callers and the CLI."""


class ConfigError(PreceptError):
    """precept.toml could not be parsed."""


class RegistryError(PreceptError):
    """The version registry is unreadable or was used inconsistently."""


class ArtifactError(PreceptError):
    """An instruction artifact could not be loaded or copied."""


class DuplicateArtifactError(ArtifactError):
    """Two artifacts resolved to the same identifier."""

    def __init__(self, artifact_id: str, first: str, second: str) -> None:
        super().__init__(f"Duplicate artifact id '{artifact_id}': {first} and {second}")
        self.artifact_id = artifact_id
        self.paths = (first, second)
