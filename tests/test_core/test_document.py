from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pytest
import yaml

from bundlekeeper.models import Project
from bundlekeeper.exceptions import DocumentError
from bundlekeeper.core.document import DependenciesDocument


@pytest.fixture
def document(tmp_path: Path) -> DependenciesDocument:
    return DependenciesDocument(tmp_path)


def _filler(values: Dict[str, Dict[str, List[str]]]):
    def _fill(name: str, entry: Dict[str, List[str]]) -> None:
        entry.update(values.get(name, {}))

    return _fill


@pytest.mark.unit
class TestDocumentWrite:
    """Tests for DependenciesDocument.write()."""

    def test_default_file_name(self, tmp_path: Path) -> None:
        assert DependenciesDocument(tmp_path).path == tmp_path / "dependencies.yml"

    def test_lists_sorted_and_deduplicated(self, document: DependenciesDocument) -> None:
        document.write(
            ["app"],
            _filler({
                "app": {
                    "dependencies": ["osgi:b:jar:1.0", "osgi:a:jar:1.0", "osgi:b:jar:1.0"],
                    "projects": ["zeta", "alpha", "zeta"],
                }
            }),
        )

        raw = yaml.safe_load(document.path.read_text())
        assert raw == {
            "app": {
                "dependencies": ["osgi:a:jar:1.0", "osgi:b:jar:1.0"],
                "projects": ["alpha", "zeta"],
            }
        }

    def test_empty_lists_are_omitted(self, document: DependenciesDocument) -> None:
        document.write(
            ["app", "lib"],
            _filler({"app": {"dependencies": [], "projects": ["lib"]}}),
        )

        raw = yaml.safe_load(document.path.read_text())
        assert raw == {"app": {"projects": ["lib"]}, "lib": {}}

    def test_write_replaces_previous_content(self, document: DependenciesDocument) -> None:
        document.write(["old"], _filler({"old": {"projects": ["x"]}}))
        document.write(["new"], _filler({}))

        assert yaml.safe_load(document.path.read_text()) == {"new": {}}

    def test_clean_writes_empty_entries(self, document: DependenciesDocument) -> None:
        document.write(["app"], _filler({"app": {"projects": ["lib"]}}))

        document.clean(["app", "lib"])

        assert document.read() == {"app": {}, "lib": {}}


@pytest.mark.unit
class TestDocumentRead:
    """Tests for reading and accessors."""

    def test_absent_file_reads_empty(self, document: DependenciesDocument) -> None:
        assert document.read() == {}
        assert document.dependencies("anything") == []

    def test_round_trip_accessors(self, tmp_path: Path) -> None:
        DependenciesDocument(tmp_path).write(
            ["app"],
            _filler({"app": {"dependencies": ["osgi:a:jar:1.0"], "projects": ["lib"]}}),
        )

        document = DependenciesDocument(tmp_path)
        assert document.bundles("app") == ["osgi:a:jar:1.0"]
        assert document.projects("app") == ["lib"]
        assert document.dependencies("app") == ["lib", "osgi:a:jar:1.0"]
        assert document.entry("missing") == {}

    def test_dependencies_union_is_sorted_and_unique(self, tmp_path: Path) -> None:
        (tmp_path / "dependencies.yml").write_text(
            "app:\n"
            "  dependencies:\n"
            "  - shared\n"
            "  - osgi:b:jar:1.0\n"
            "  - osgi:b:jar:1.0\n"
            "  projects:\n"
            "  - shared\n"
            "  - alpha\n"
        )

        document = DependenciesDocument(tmp_path)

        assert document.dependencies("app") == ["alpha", "osgi:b:jar:1.0", "shared"]

    def test_project_dependencies_reads_document(self, tmp_path: Path) -> None:
        (tmp_path / "dependencies.yml").write_text("app:\n  projects: [lib]\n")

        project = Project("app", base_dir=tmp_path)

        assert project.dependencies(DependenciesDocument(tmp_path)) == ["lib"]

    def test_null_entry_reads_empty(self, tmp_path: Path) -> None:
        (tmp_path / "dependencies.yml").write_text("app:\n")

        assert DependenciesDocument(tmp_path).read() == {"app": {}}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "dependencies.yml").write_text("app: [unclosed\n")

        with pytest.raises(DocumentError) as exc_info:
            DependenciesDocument(tmp_path).read()

        assert exc_info.value.file_path == str(tmp_path / "dependencies.yml")

    @pytest.mark.parametrize(
        "content",
        ["- a\n- b\n", "app: [a, b]\n"],
        ids=["top-level-list", "entry-not-mapping"],
    )
    def test_wrong_shape_raises(self, tmp_path: Path, content: str) -> None:
        (tmp_path / "dependencies.yml").write_text(content)

        with pytest.raises(DocumentError):
            DependenciesDocument(tmp_path).read()
