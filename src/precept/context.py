"""Editing context: the signals used to pick applicable instructions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import PurePosixPath

# extension → language directory name under instructions/languages/
LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".cs": "csharp",
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "typescript",
    ".jsx": "typescript",
    ".bicep": "bicep",
    ".tf": "terraform",
    ".tfvars": "terraform",
}

FRAMEWORK_EXTENSIONS: dict[str, str] = {
    ".tsx": "react",
    ".jsx": "react",
}


def extensions_for(language: str) -> tuple[str, ...]:
    """Default ``applyTo`` globs for a language or framework directory."""
    globs = [f"*{ext}" for ext, lang in LANGUAGE_EXTENSIONS.items() if lang == language]
    globs += [f"*{ext}" for ext, fw in FRAMEWORK_EXTENSIONS.items() if fw == language]
    return tuple(globs)


def _normalize(path: str) -> str:
    """Forward slashes, no leading ``./``."""
    # PurePosixPath already drops a leading "./" segment
    return PurePosixPath(path.replace("\\", "/")).as_posix()


@dataclass(frozen=True)
class Context:
    """Per-interaction signals. Created for one resolution and then discarded."""

    file_path: str | None = None
    languages: frozenset[str] = field(default_factory=frozenset)
    frameworks: frozenset[str] = field(default_factory=frozenset)
    scenarios: frozenset[str] = field(default_factory=frozenset)

    def is_empty(self) -> bool:
        return not (self.file_path or self.languages or self.frameworks or self.scenarios)

    @classmethod
    def for_file(
        cls,
        path: str | None,
        scenarios: Iterable[str] = (),
        frameworks: Iterable[str] = (),
        languages: Iterable[str] = (),
    ) -> Context:
        """Build a context for a file being edited, detecting what we can from its path."""
        langs = set(languages)
        fws = set(frameworks)
        scens = set(scenarios)

        file_path = _normalize(path) if path else None
        if file_path:
            p = PurePosixPath(file_path)
            ext = p.suffix.lower()
            if ext in LANGUAGE_EXTENSIONS:
                langs.add(LANGUAGE_EXTENSIONS[ext])
            if ext in FRAMEWORK_EXTENSIONS:
                fws.add(FRAMEWORK_EXTENSIONS[ext])
            if ext in (".yml", ".yaml"):
                if ".github/workflows" in p.parent.as_posix():
                    scens.add("cicd-github")
                if p.name.startswith("azure-pipelines"):
                    scens.add("cicd-azure-devops")
            if ext == ".ipynb":
                scens.add("fabric-notebook")

        return cls(
            file_path=file_path,
            languages=frozenset(langs),
            frameworks=frozenset(fws),
            scenarios=frozenset(scens),
        )
