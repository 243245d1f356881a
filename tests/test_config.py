from __future__ import annotations

from pathlib import Path

import pytest

from bundlekeeper.config import (
    BundleKeeperConfig,
    _parse_section,
    _pyproject_has_section,
    _read_toml,
    discover_config_file,
    load_config,
)
from bundlekeeper.exceptions import ConfigError


@pytest.mark.unit
class TestBundleKeeperConfig:
    """Tests for BundleKeeperConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test BundleKeeperConfig initializes with correct defaults."""
        config = BundleKeeperConfig()

        assert config.group == "osgi"
        assert config.dependencies_file == "dependencies.yml"
        assert config.local_repository == Path("~/.m2/repository")
        assert config.remote_repository is None
        assert config.projects == []
        assert config.source_path is None

    def test_workspace_name_defaults_to_directory(self, tmp_path: Path) -> None:
        assert BundleKeeperConfig(base_dir=tmp_path).workspace_name == tmp_path.name
        assert BundleKeeperConfig(name="ws", base_dir=tmp_path).workspace_name == "ws"

    def test_to_log_dict(self, tmp_path: Path) -> None:
        config = BundleKeeperConfig(name="ws", base_dir=tmp_path, source_path=tmp_path / "x")

        result = config.to_log_dict()

        assert result["name"] == "ws"
        assert result["group"] == "osgi"
        assert "source_path" not in result


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file()."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[bundlekeeper]\n")

        assert discover_config_file(config_file) == config_file.resolve()

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            discover_config_file(tmp_path / "absent.toml")

    def test_bundlekeeper_toml_preferred(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "bundlekeeper.toml").write_text("[bundlekeeper]\n")
        (tmp_path / "pyproject.toml").write_text("[tool.bundlekeeper]\n")
        monkeypatch.chdir(tmp_path)

        assert discover_config_file().resolve() == (tmp_path / "bundlekeeper.toml").resolve()

    def test_pyproject_with_section(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.bundlekeeper]\ngroup = 'g'\n")
        monkeypatch.chdir(tmp_path)

        assert discover_config_file().resolve() == (tmp_path / "pyproject.toml").resolve()

    def test_pyproject_without_section_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.other]\n")
        monkeypatch.chdir(tmp_path)

        assert discover_config_file() is None

    def test_invalid_pyproject_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("not [valid")

        assert _pyproject_has_section(path) is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml()."""

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("key = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            _read_toml(path)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section()."""

    def test_empty_section_uses_defaults(self, tmp_path: Path) -> None:
        config = _parse_section({}, base_dir=tmp_path, config_path="c")

        assert config.base_dir == tmp_path
        assert config.bundle_paths == []

    def test_full_section(self, tmp_path: Path) -> None:
        section = {
            "name": "ws",
            "group": "org.example",
            "bundle_paths": ["platform", "/abs/plugins"],
            "local_repository": "repo",
            "remote_repository": "https://repo.example.com",
            "release_to": "dist",
            "dependencies_file": "deps.yml",
            "nested_archive_pattern": r".*\.zip$",
            "execution_environments": {"JavaSE-1.8": "/jvm/8"},
            "projects": [
                {
                    "name": "app",
                    "path": "app",
                    "packages": [
                        {"file": "app/target/app.jar", "manifest": {"Bundle-Version": "1.0"}}
                    ],
                }
            ],
        }

        config = _parse_section(section, base_dir=tmp_path, config_path="c")

        assert config.name == "ws"
        assert config.group == "org.example"
        assert config.bundle_paths == [tmp_path / "platform", Path("/abs/plugins")]
        assert config.local_repository == tmp_path / "repo"
        assert config.release_to == tmp_path / "dist"
        assert config.remote_repository == "https://repo.example.com"
        assert config.dependencies_file == "deps.yml"
        assert config.nested_archive_pattern == r".*\.zip$"
        assert config.execution_environments == {"JavaSE-1.8": "/jvm/8"}
        (project,) = config.projects
        assert project.name == "app"
        assert project.path == tmp_path / "app"
        assert project.packages[0].file == tmp_path / "app" / "target" / "app.jar"
        assert project.packages[0].manifest == {"Bundle-Version": "1.0"}

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"colour": "red"}, base_dir=tmp_path, config_path="c")

        assert exc_info.value.option == "colour"

    @pytest.mark.parametrize(
        "section",
        [
            {"group": 1},
            {"group": ""},
            {"bundle_paths": "platform"},
            {"bundle_paths": [1]},
            {"execution_environments": {"JavaSE-1.8": 8}},
            {"projects": [{"name": "no-path"}]},
            {"projects": [{"path": "app", "packages": [{"manifest": {}}]}]},
            {"projects": [{"path": "app", "extra": True}]},
        ],
        ids=[
            "wrong-type",
            "empty-string",
            "paths-not-list",
            "path-not-string",
            "ee-not-string",
            "project-without-path",
            "package-without-file",
            "project-unknown-key",
        ],
    )
    def test_invalid_values(self, tmp_path: Path, section: dict) -> None:
        with pytest.raises(ConfigError):
            _parse_section(section, base_dir=tmp_path, config_path="c")


@pytest.mark.integration
class TestLoadConfig:
    """Tests for load_config()."""

    def test_no_file_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.source_path is None
        assert config.group == "osgi"

    def test_loads_bundlekeeper_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bundlekeeper.toml"
        path.write_text(
            "[bundlekeeper]\n"
            'name = "ws"\n'
            'bundle_paths = ["platform"]\n'
            "\n"
            "[[bundlekeeper.projects]]\n"
            'path = "app"\n'
        )

        config = load_config(path)

        assert config.source_path == path.resolve()
        assert config.base_dir == tmp_path.resolve()
        assert config.workspace_name == "ws"
        assert config.bundle_paths == [tmp_path.resolve() / "platform"]
        assert config.projects[0].path == tmp_path.resolve() / "app"

    def test_loads_pyproject_section(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.bundlekeeper]\ngroup = "org.example"\n')

        assert load_config(path).group == "org.example"
