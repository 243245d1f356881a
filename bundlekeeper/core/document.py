"""Persisted dependency graph (``dependencies.yml``).

The document maps each project name to the bundles and projects it depends
on::

    my.project:
      dependencies:
      - osgi:org.example.core:jar:1.0.0
      projects:
      - my.other.project
    my.other.project: {}

Lists are sorted and de-duplicated when written, and empty lists are left
out. Every write replaces the whole file; nothing is merged with a
previous version.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Union

import yaml

from bundlekeeper.constants import DEPENDENCIES_FILE
from bundlekeeper.exceptions import DocumentError
from bundlekeeper.utils import get_logger, safe_read_file, safe_write_file

logger = get_logger("document")

# Public API
__all__ = ["DependenciesDocument", "DEPENDENCIES_KEY", "PROJECTS_KEY"]

DEPENDENCIES_KEY = "dependencies"
PROJECTS_KEY = "projects"

Entry = Dict[str, List[str]]
FillFunction = Callable[[str, Entry], None]


class DependenciesDocument:
    """Reads and writes the dependencies document of a workspace.

    Args:
        base_dir: Directory holding the document (the workspace root).
        filename: Document file name.
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        filename: str = DEPENDENCIES_FILE,
    ) -> None:
        self.path = Path(base_dir) / filename
        self._data: Dict[str, Entry] = {}

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, project_names: Iterable[str], fill: FillFunction) -> Dict[str, Entry]:
        """Rewrite the document for ``project_names``.

        ``fill(name, entry)`` is called once per project and may set
        ``entry["dependencies"]`` and ``entry["projects"]``.

        Returns:
            The mapping that was written.
        """
        data: Dict[str, Entry] = {}
        for name in project_names:
            entry: Entry = {}
            fill(name, entry)
            data[name] = _normalize_entry(entry)

        safe_write_file(self.path, yaml.safe_dump(data, default_flow_style=False, sort_keys=True))
        logger.info("Wrote dependencies for %d project(s) to %s", len(data), self.path)

        self._data = data
        return data

    def clean(self, project_names: Iterable[str]) -> Dict[str, Entry]:
        """Rewrite the document with an empty entry for every project."""
        return self.write(project_names, lambda name, entry: None)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self) -> Dict[str, Entry]:
        """Load the document; an absent file reads as an empty mapping.

        Raises:
            DocumentError: The file is not valid YAML or not a mapping of
                project entries.
        """
        if not self.path.exists():
            logger.debug("No dependencies document at %s", self.path)
            self._data = {}
            return {}

        try:
            raw = yaml.safe_load(safe_read_file(self.path))
        except yaml.YAMLError as exc:
            raise DocumentError(
                f"Invalid YAML in {self.path.name}: {exc}",
                file_path=str(self.path),
            ) from exc

        self._data = _validate(raw, self.path)
        return self._data

    def entry(self, project_name: str) -> Entry:
        """Entry of ``project_name``, read lazily; empty when unknown."""
        if not self._data:
            self.read()
        return self._data.get(project_name, {})

    def bundles(self, project_name: str) -> List[str]:
        return list(self.entry(project_name).get(DEPENDENCIES_KEY, []))

    def projects(self, project_name: str) -> List[str]:
        return list(self.entry(project_name).get(PROJECTS_KEY, []))

    def dependencies(self, project_name: str) -> List[str]:
        """Sorted union of the project's bundle and project dependencies."""
        return sorted(set(self.bundles(project_name)) | set(self.projects(project_name)))


def _normalize_entry(entry: Dict[str, Any]) -> Entry:
    normalized: Entry = {}
    for key in (DEPENDENCIES_KEY, PROJECTS_KEY):
        values = sorted({str(v) for v in entry.get(key) or []})
        if values:
            normalized[key] = values
    return normalized


def _validate(raw: Any, path: Path) -> Dict[str, Entry]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DocumentError(
            f"Expected a mapping of projects, got {type(raw).__name__}",
            file_path=str(path),
        )

    data: Dict[str, Entry] = {}
    for name, entry in raw.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise DocumentError(
                f"Entry for {name} must be a mapping, got {type(entry).__name__}",
                file_path=str(path),
            )
        data[str(name)] = _normalize_entry(entry)
    return data
