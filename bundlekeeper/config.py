"""Configuration file loader for bundlekeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``bundlekeeper.toml``: settings under ``[bundlekeeper]`` table
- ``pyproject.toml``: settings under ``[tool.bundlekeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``BUNDLEKEEPER_CONFIG``
2. ``bundlekeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.bundlekeeper]`` section

Relative paths in the file are resolved against the file's directory, which
is also the workspace root.

Example (``bundlekeeper.toml``)::

    [bundlekeeper]
    name = "my.workspace"
    bundle_paths = ["target-platform/plugins"]
    local_repository = "~/.m2/repository"
    remote_repository = "https://repo.example.com/releases"

    [bundlekeeper.execution_environments]
    "JavaSE-1.6" = "/usr/lib/jvm/java-6"

    [[bundlekeeper.projects]]
    name = "my.bundle"
    path = "my.bundle"
    packages = [{ file = "my.bundle/target/my.bundle-1.0.0.jar" }]
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import tomli as tomllib

from bundlekeeper.exceptions import ConfigError
from bundlekeeper.utils.logger import get_logger
from bundlekeeper.constants import (
    DEFAULT_GROUP,
    DEFAULT_LOCAL_REPOSITORY,
    DEFAULT_RELEASE_TO,
    DEPENDENCIES_FILE,
    NESTED_ARCHIVE_PATTERN,
)

logger = get_logger("config")

_KNOWN_KEYS = {
    "name",
    "group",
    "bundle_paths",
    "local_repository",
    "remote_repository",
    "release_to",
    "dependencies_file",
    "nested_archive_pattern",
    "execution_environments",
    "projects",
}
_PROJECT_KEYS = {"name", "path", "packages"}
_PACKAGE_KEYS = {"file", "manifest"}


@dataclass
class PackageConfig:
    """A bundle packaging declared for a project."""

    file: Path
    manifest: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProjectConfig:
    """A workspace project declared in the configuration."""

    path: Path
    name: Optional[str] = None
    packages: List[PackageConfig] = field(default_factory=list)


@dataclass
class BundleKeeperConfig:
    """Parsed and validated bundlekeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        name: Name of the workspace root project (defaults to the
            directory name).
        group: Repository group for external bundles.
        bundle_paths: Directories scanned for external bundles.
        local_repository: Target of ``install``.
        remote_repository: Target URL of ``upload``.
        release_to: Release directory for ``install-bundles``.
        dependencies_file: Name of the dependencies document.
        nested_archive_pattern: File-name pattern of nested archives.
        execution_environments: Execution environment name → location.
        projects: Workspace sub-projects.
        base_dir: Workspace root (directory of the config file, or cwd).
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    name: Optional[str] = None
    group: str = DEFAULT_GROUP
    bundle_paths: List[Path] = field(default_factory=list)
    local_repository: Path = field(default_factory=lambda: Path(DEFAULT_LOCAL_REPOSITORY))
    remote_repository: Optional[str] = None
    release_to: Path = field(default_factory=lambda: Path(DEFAULT_RELEASE_TO))
    dependencies_file: str = DEPENDENCIES_FILE
    nested_archive_pattern: str = NESTED_ARCHIVE_PATTERN
    execution_environments: Dict[str, str] = field(default_factory=dict)
    projects: List[ProjectConfig] = field(default_factory=list)

    # Metadata (not user-facing options)
    base_dir: Path = field(default_factory=Path.cwd, repr=False)
    source_path: Optional[Path] = field(default=None, repr=False)

    @property
    def workspace_name(self) -> str:
        return self.name or self.base_dir.resolve().name

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "name": self.workspace_name,
            "group": self.group,
            "bundle_paths": [str(p) for p in self.bundle_paths],
            "local_repository": str(self.local_repository),
            "remote_repository": self.remote_repository,
            "release_to": str(self.release_to),
            "dependencies_file": self.dependencies_file,
            "projects": [str(p.path) for p in self.projects],
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    bundlekeeper_toml = cwd / "bundlekeeper.toml"
    if bundlekeeper_toml.is_file():
        logger.debug("Found bundlekeeper.toml: %s", bundlekeeper_toml)
        return bundlekeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.bundlekeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.bundlekeeper] section.

    Parse errors count as "no section" so discovery can fall back.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "bundlekeeper" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> BundleKeeperConfig:
    """Load and validate bundlekeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`BundleKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return BundleKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("bundlekeeper", {})
    else:
        section = raw.get("bundlekeeper", {})

    config = _parse_section(section, base_dir=resolved.parent, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _expect(value: Any, kind: type, option: str, config_path: str) -> Any:
    if not isinstance(value, kind) or (kind is str and not value):
        raise ConfigError(
            f"{option} must be a non-empty {kind.__name__}, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    return value


def _reject_unknown(section: Dict[str, Any], known: set, where: str, config_path: str) -> None:
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys in {where}: {', '.join(sorted(unknown))}",
            config_path=config_path,
            option=sorted(unknown)[0],
        )


def _string_map(value: Any, option: str, config_path: str) -> Dict[str, str]:
    _expect(value, dict, option, config_path)
    for key, item in value.items():
        _expect(item, str, f"{option}.{key}", config_path)
    return dict(value)


def _parse_section(
    section: Dict[str, Any],
    *,
    base_dir: Path,
    config_path: str,
) -> BundleKeeperConfig:
    """Parse and validate the bundlekeeper configuration section.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = BundleKeeperConfig(base_dir=base_dir)
    _reject_unknown(section, _KNOWN_KEYS, "[bundlekeeper]", config_path)

    def _path(value: str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else base_dir / path

    for option in ("name", "group", "remote_repository", "dependencies_file",
                   "nested_archive_pattern"):
        if option in section:
            setattr(config, option, _expect(section[option], str, option, config_path))

    for option in ("local_repository", "release_to"):
        if option in section:
            setattr(config, option, _path(_expect(section[option], str, option, config_path)))

    if "bundle_paths" in section:
        paths = _expect(section["bundle_paths"], list, "bundle_paths", config_path)
        config.bundle_paths = [
            _path(_expect(p, str, "bundle_paths", config_path)) for p in paths
        ]

    if "execution_environments" in section:
        config.execution_environments = _string_map(
            section["execution_environments"], "execution_environments", config_path
        )

    if "projects" in section:
        entries = _expect(section["projects"], list, "projects", config_path)
        config.projects = [
            _parse_project(entry, _path, config_path) for entry in entries
        ]

    return config


def _parse_project(entry: Any, to_path: Any, config_path: str) -> ProjectConfig:
    _expect(entry, dict, "projects", config_path)
    _reject_unknown(entry, _PROJECT_KEYS, "[[bundlekeeper.projects]]", config_path)

    if "path" not in entry:
        raise ConfigError(
            "Every project needs a path",
            config_path=config_path,
            option="projects.path",
        )

    project = ProjectConfig(path=to_path(_expect(entry["path"], str, "projects.path", config_path)))
    if "name" in entry:
        project.name = _expect(entry["name"], str, "projects.name", config_path)

    for package in _expect(entry.get("packages", []), list, "projects.packages", config_path):
        _expect(package, dict, "projects.packages", config_path)
        _reject_unknown(package, _PACKAGE_KEYS, "projects.packages", config_path)
        if "file" not in package:
            raise ConfigError(
                "Every package needs a file",
                config_path=config_path,
                option="projects.packages.file",
            )
        project.packages.append(
            PackageConfig(
                file=to_path(_expect(package["file"], str, "projects.packages.file", config_path)),
                manifest=_string_map(
                    package.get("manifest", {}), "projects.packages.manifest", config_path
                ),
            )
        )

    return project
