"""
Centralized constants for bundlekeeper.

This module defines immutable configuration values used across
bundlekeeper, including network settings, repository layout, archive
handling and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "bundlekeeper/{version} (https://github.com/bundlekeeper/bundlekeeper)"
)

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Workspace defaults
# ---------------------------------------------------------------------------

#: Name of the persisted dependencies document.
DEPENDENCIES_FILE: Final[str] = "dependencies.yml"

#: Repository group assigned to external bundles.
DEFAULT_GROUP: Final[str] = "osgi"

#: Local repository used by ``install`` when none is configured.
DEFAULT_LOCAL_REPOSITORY: Final[str] = "~/.m2/repository"

#: Release directory used by ``install-bundles``.
DEFAULT_RELEASE_TO: Final[str] = "release"

#: Sub-directory of the release directory receiving bundle artifacts.
PLUGINS_DIR: Final[str] = "plugins"

# ---------------------------------------------------------------------------
# Bundle archives
# ---------------------------------------------------------------------------

#: Location of the manifest inside a bundle.
MANIFEST_PATH: Final[str] = "META-INF/MANIFEST.MF"

#: File names treated as nested archives when repacking exploded bundles.
NESTED_ARCHIVE_PATTERN: Final[str] = r".*\.jar$"

#: Extensions recognised as packaged bundles when scanning directories.
BUNDLE_ARCHIVE_SUFFIXES: Final[Sequence[str]] = (".jar",)

#: Timestamp written on every repacked entry (zip epoch).
ARCHIVE_ENTRY_TIMESTAMP: Final = (1980, 1, 1, 0, 0, 0)

# ---------------------------------------------------------------------------
# Manifest headers
# ---------------------------------------------------------------------------

MANIFEST_HEADERS: Final[Mapping[str, str]] = {
    "symbolic_name": "Bundle-SymbolicName",
    "version": "Bundle-Version",
    "require_bundle": "Require-Bundle",
    "import_package": "Import-Package",
    "export_package": "Export-Package",
    "fragment_host": "Fragment-Host",
    "execution_environment": "Bundle-RequiredExecutionEnvironment",
}

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
