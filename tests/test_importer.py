"""Tests for importing artifacts from a shared library."""

from __future__ import annotations

import pytest
from pathlib import Path

from precept.errors import ArtifactError
from precept.importer import import_library, refresh_library
from precept.registry import Registry


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def library(tmp_path: Path) -> Path:
    root = tmp_path / "library" / "copilot"
    _write(
        root / "instructions" / "languages" / "python" / "standards.md",
        "---\nversion: '1.0'\n---\n# Python v1\n",
    )
    _write(root / "prompts" / "review.md", "# Review\n")
    _write(root / "project" / "example.md", "# Example override\n")
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    return tmp_path / "project" / "copilot"


class TestImport:
    def test_copies_and_registers(self, library: Path, project: Path):
        registry = Registry()
        report = import_library(library, project, registry)

        assert sorted(report.imported) == ["languages/python/standards", "prompts/review"]
        assert (project / "instructions" / "languages" / "python" / "standards.md").exists()
        assert registry.version_of("languages/python/standards") == "1.0"
        assert registry.version_of("prompts/review") == "0"
        assert registry.get("prompts/review").source.endswith("review.md")

    def test_library_overrides_not_imported(self, library: Path, project: Path):
        report = import_library(library, project, Registry())
        assert "project/example" in report.skipped
        assert not (project / "project").exists()

    def test_already_registered_is_skipped(self, library: Path, project: Path):
        registry = Registry()
        import_library(library, project, registry)
        report = import_library(library, project, registry)
        assert report.imported == []
        assert "prompts/review" in report.skipped

    def test_frontmatter_override_not_imported(self, library: Path, project: Path):
        _write(library / "prompts" / "override.md", "---\ncategory: project\n---\n# Team rules\n")
        report = import_library(library, project, Registry())
        assert "prompts/override" not in report.imported
        assert "prompts/override" in report.skipped
        assert not (project / "prompts" / "override.md").exists()

    def test_local_override_kept(self, library: Path, project: Path):
        local = _write(
            project / "prompts" / "review.md", "---\ncategory: project\n---\n# Our review\n"
        )
        registry = Registry()
        report = import_library(library, project, registry)
        assert "prompts/review" in report.skipped
        assert "prompts/review" not in registry
        assert "Our review" in local.read_text(encoding="utf-8")

    def test_only(self, library: Path, project: Path):
        registry = Registry()
        report = import_library(library, project, registry, only=["prompts/review"])
        assert report.imported == ["prompts/review"]
        assert len(registry) == 1

    def test_only_unknown_id(self, library: Path, project: Path):
        with pytest.raises(ArtifactError):
            import_library(library, project, Registry(), only=["nope"])

    def test_summary(self, library: Path, project: Path):
        report = import_library(library, project, Registry())
        assert report.summary() == "2 imported, 0 refreshed, 1 skipped"


class TestRefresh:
    def test_newer_version_refreshes(self, library: Path, project: Path):
        registry = Registry()
        import_library(library, project, registry)
        _write(
            library / "instructions" / "languages" / "python" / "standards.md",
            "---\nversion: '1.1'\n---\n# Python v1.1\n",
        )

        report = refresh_library(library, project, registry)

        assert report.refreshed == ["languages/python/standards"]
        assert registry.version_of("languages/python/standards") == "1.1"
        copied = project / "instructions" / "languages" / "python" / "standards.md"
        assert "v1.1" in copied.read_text(encoding="utf-8")

    def test_same_version_is_skipped(self, library: Path, project: Path):
        registry = Registry()
        import_library(library, project, registry)
        report = refresh_library(library, project, registry)
        assert report.refreshed == []

    def test_promoted_local_override_not_overwritten(self, library: Path, project: Path):
        registry = Registry()
        import_library(library, project, registry)
        local = _write(
            project / "instructions" / "languages" / "python" / "standards.md",
            "---\ncategory: project\nversion: '1.0'\n---\n# Our Python rules\n",
        )
        _write(
            library / "instructions" / "languages" / "python" / "standards.md",
            "---\nversion: '2.0'\n---\n# Python v2\n",
        )

        report = refresh_library(library, project, registry)

        assert report.refreshed == []
        assert "Our Python rules" in local.read_text(encoding="utf-8")
        assert registry.version_of("languages/python/standards") == "1.0"

    def test_unregistered_not_imported(self, library: Path, project: Path):
        registry = Registry()
        report = refresh_library(library, project, registry)
        assert report.refreshed == []
        assert len(registry) == 0
        assert not project.exists()
