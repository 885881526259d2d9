"""Tests for the precept pipeline and the command line."""

from __future__ import annotations

import logging

import pytest
from pathlib import Path

from precept.__main__ import main
from precept.config import PreceptConfig, ResolutionConfig
from precept.context import Context
from precept.core import Precept
from precept.registry import Registry


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def root(tmp_path: Path) -> Path:
    copilot = tmp_path / "copilot"
    _write(
        copilot / "instructions" / "languages" / "python" / "standards.md",
        "---\nid: py-std\napplyTo: '*.py'\n---\n# Python standards\n\n- Always use tabs\n",
    )
    _write(
        copilot / "project" / "python.md",
        "---\nid: proj-py\napplyTo: '*.py'\n---\n# Project rules\n\n- Never use tabs\n",
    )
    _write(
        copilot / "instructions" / "scenarios" / "cicd-github" / "actions.md",
        "---\nid: gh-actions\napplyTo: .github/workflows/*.yml\n---\n# Actions\n",
    )
    return tmp_path


class PipeDetector:
    @property
    def name(self) -> str:
        return "pipe"

    def detect(self, first, second):
        return ["use a | b"]


@pytest.fixture
def config(root: Path) -> PreceptConfig:
    return PreceptConfig(root=root)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in [
        "PRECEPT_ROOT",
        "PRECEPT_LOG_LEVEL",
        "PRECEPT_DETECT_CONFLICTS",
        "PRECEPT_CONTEXT_WARN_CHARS",
    ]:
        monkeypatch.delenv(key, raising=False)


class TestPrecept:
    def test_applicable(self, config: PreceptConfig):
        precept = Precept.from_config(config)
        resolution = precept.applicable(Context.for_file("app/main.py"))

        assert resolution.ids == ["proj-py", "py-std"]
        assert len(resolution.conflicts) == 1
        assert resolution.conflicts[0].first.id == "proj-py"

    def test_conflicts_logged_to_file(self, config: PreceptConfig):
        Precept.from_config(config).applicable(Context.for_file("main.py"))
        assert config.conflict_log_path.exists()

    def test_conflict_detection_disabled(self, root: Path):
        config = PreceptConfig(root=root, resolution=ResolutionConfig(detect_conflicts=False))
        resolution = Precept.from_config(config).applicable(Context.for_file("main.py"))
        assert resolution.conflicts == []
        assert not config.conflict_log_path.exists()

    def test_empty_context(self, config: PreceptConfig):
        resolution = Precept.from_config(config).applicable(Context())
        assert resolution.artifacts == []
        assert resolution.conflicts == []

    def test_registry_versions_in_render(self, config: PreceptConfig):
        registry = Registry()
        registry.record_import("py-std", "2.1")
        precept = Precept(config, registry)
        precept.load()

        text = precept.render(precept.applicable(Context.for_file("main.py")))

        assert text.index("## proj-py (project)") < text.index("## py-std (language) v2.1")
        assert "\n\n---\n\n" in text
        assert "## Conflicts (earlier entry wins)" in text
        assert "| proj-py | py-std |" in text

    def test_render_empty(self, config: PreceptConfig):
        precept = Precept.from_config(config)
        assert precept.render(precept.applicable(Context.for_file("main.go"))) == ""

    def test_render_warns_when_large(self, root: Path, caplog):
        config = PreceptConfig(root=root, resolution=ResolutionConfig(context_warn_chars=10))
        precept = Precept.from_config(config)
        with caplog.at_level(logging.WARNING, logger="precept.core"):
            precept.render(precept.applicable(Context.for_file("main.py")))
        assert "Instruction context is" in caplog.text

    def test_independent_resolutions(self, config: PreceptConfig):
        precept = Precept.from_config(config)
        py = precept.applicable(Context.for_file("main.py"))
        gh = precept.applicable(Context.for_file(".github/workflows/ci.yml"))
        assert gh.ids == ["gh-actions"]
        assert py.ids == ["proj-py", "py-std"]
        assert len(precept.artifacts) == 3

    def test_render_escapes_pipes_in_conflicts(self, config: PreceptConfig):
        precept = Precept(config, Registry(), detectors=[PipeDetector()])
        precept.load()

        text = precept.render(precept.applicable(Context.for_file("main.py")))

        assert "| proj-py | py-std | use a \\| b |" in text


class TestCLI:
    def test_resolve(self, root: Path, capsys):
        assert main(["--root", str(root), "resolve", "main.py"]) == 0
        assert capsys.readouterr().out.split() == ["proj-py", "py-std"]

    def test_resolve_scenario_only(self, root: Path, capsys):
        assert main(["--root", str(root), "resolve", "--scenario", "cicd-github"]) == 0
        assert capsys.readouterr().out.split() == ["gh-actions"]

    def test_conflicts_exit_code(self, root: Path, capsys):
        assert main(["--root", str(root), "conflicts", "main.py"]) == 1
        assert "proj-py <> py-std" in capsys.readouterr().out
        assert main(["--root", str(root), "conflicts", "main.cs"]) == 0

    def test_render(self, root: Path, capsys):
        assert main(["--root", str(root), "render", "main.py"]) == 0
        assert "# Project rules" in capsys.readouterr().out

    def test_list(self, root: Path, capsys):
        assert main(["--root", str(root), "list"]) == 0
        out = capsys.readouterr().out
        assert "py-std\tlanguage" in out
        assert "proj-py\tproject" in out

    def test_import_and_refresh(self, root: Path, tmp_path: Path, capsys):
        library = tmp_path / "lib"
        _write(
            library / "copilot" / "prompts" / "review.md",
            "---\nversion: '1.0'\n---\n# Review\n",
        )

        assert main(["--root", str(root), "import", str(library)]) == 0
        assert "1 imported" in capsys.readouterr().out
        assert Registry.load(root / ".copilot" / "registry.json").version_of("prompts/review") == "1.0"

        assert main(["--root", str(root), "refresh", str(library)]) == 0
        assert "0 refreshed" in capsys.readouterr().out

    def test_malformed_config_exit_code(self, root: Path, capsys):
        bad = _write(root / "precept.toml", "log_level = \n")
        assert main(["--config", str(bad), "--root", str(root), "list"]) == 2
        assert "Invalid config file" in capsys.readouterr().err

    def test_precept_error_exit_code(self, root: Path, capsys):
        registry = root / ".copilot" / "registry.json"
        _write(registry, "{broken")
        assert main(["--root", str(root), "resolve", "main.py"]) == 2
        assert "precept:" in capsys.readouterr().err
