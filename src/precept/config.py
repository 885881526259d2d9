"""Configuration loading from environment variables and precept.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from precept.errors import ConfigError

_CONFIG_FILENAME = "precept.toml"
_DEFAULT_WARN_CHARS = 12000

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class PathsConfig:
    """Layout of the instruction tree, relative to the project root."""

    copilot_dir: str = "copilot"
    registry_file: str = ".copilot/registry.json"
    conflict_log: str = ".copilot/conflicts.jsonl"


@dataclass
class ResolutionConfig:
    """Resolution pipeline options."""

    detect_conflicts: bool = True
    context_warn_chars: int = _DEFAULT_WARN_CHARS


@dataclass
class PreceptConfig:
    """Top-level precept configuration."""

    root: Path = field(default_factory=Path.cwd)
    paths: PathsConfig = field(default_factory=PathsConfig)
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    log_level: str = "INFO"

    @property
    def copilot_dir(self) -> Path:
        return self.root / self.paths.copilot_dir

    @property
    def registry_path(self) -> Path:
        return self.root / self.paths.registry_file

    @property
    def conflict_log_path(self) -> Path:
        return self.root / self.paths.conflict_log


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def load_config(config_path: Path | None = None) -> PreceptConfig:
    """Load configuration from environment variables and optional precept.toml.

    Priority: environment variables > precept.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = _read_toml(config_path)
    else:
        # Search current dir and ~/.precept/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".precept" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = _read_toml(candidate)
                break

    paths_data = file_data.get("paths", {})
    resolution_data = file_data.get("resolution", {})

    config = PreceptConfig(
        root=Path(os.getenv("PRECEPT_ROOT", file_data.get("root", str(Path.cwd())))),
        paths=PathsConfig(
            copilot_dir=paths_data.get("copilot_dir", "copilot"),
            registry_file=paths_data.get("registry_file", ".copilot/registry.json"),
            conflict_log=paths_data.get("conflict_log", ".copilot/conflicts.jsonl"),
        ),
        resolution=ResolutionConfig(
            detect_conflicts=_as_bool(
                os.getenv(
                    "PRECEPT_DETECT_CONFLICTS",
                    resolution_data.get("detect_conflicts", True),
                )
            ),
            context_warn_chars=int(
                os.getenv(
                    "PRECEPT_CONTEXT_WARN_CHARS",
                    resolution_data.get("context_warn_chars", _DEFAULT_WARN_CHARS),
                )
            ),
        ),
        log_level=os.getenv("PRECEPT_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
