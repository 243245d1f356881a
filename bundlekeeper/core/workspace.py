"""Workspace-level tasks.

A :class:`Workspace` is a root project plus its sub-projects. The functions
here are what the CLI commands run:

- :func:`resolve_dependencies` collects every project and rewrites the
  dependencies document;
- :func:`clean_dependencies` rewrites it with empty entries;
- :func:`collect_install_set` gathers the external bundles to publish;
- :func:`install_bundles` copies the workspace's own bundles to the
  release directory.
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from bundlekeeper.models import Bundle, BundlePackaging, Project
from bundlekeeper.config import BundleKeeperConfig
from bundlekeeper.constants import PLUGINS_DIR
from bundlekeeper.utils import copy_file, get_logger
from bundlekeeper.core.cache import ResolutionCache
from bundlekeeper.core.manifest import ManifestParser
from bundlekeeper.core.registry import BundleRegistry
from bundlekeeper.core.document import (
    DEPENDENCIES_KEY,
    PROJECTS_KEY,
    DependenciesDocument,
)
from bundlekeeper.core.collector import CollectionResult, DependencyCollector

logger = get_logger("workspace")

# Public API
__all__ = [
    "Workspace",
    "load_workspace",
    "new_collector",
    "collect_workspace",
    "resolve_dependencies",
    "clean_dependencies",
    "collect_install_set",
    "install_bundles",
]


@dataclass
class Workspace:
    """A root project and its sub-projects.

    Attributes:
        root: The workspace root project.
        projects: Sub-projects, in declaration order.
        registry: Resolution collaborator for the workspace.
    """

    root: Project
    projects: List[Project] = field(default_factory=list)
    registry: Optional[BundleRegistry] = None

    def all_projects(self) -> List[Project]:
        """Sub-projects followed by the root."""
        return [*self.projects, self.root]

    def project_names(self) -> List[str]:
        return [p.name for p in self.all_projects()]


def load_workspace(config: BundleKeeperConfig) -> Workspace:
    """Build the workspace and its registry from configuration.

    Project manifests are read from each project directory; external
    bundles are scanned from ``config.bundle_paths``.
    """
    parser = ManifestParser(config.group)

    projects = [
        parser.read_project(
            entry.path,
            name=entry.name,
            packagings=[BundlePackaging(p.file, p.manifest) for p in entry.packages],
        )
        for entry in config.projects
    ]
    root = parser.read_project(config.base_dir, name=config.workspace_name)

    registry = BundleRegistry([*projects, root])
    registry.scan(config.bundle_paths, config.group)

    logger.info("Loaded workspace %s with %d sub-project(s)", root.name, len(projects))
    return Workspace(root=root, projects=projects, registry=registry)


def collect_workspace(
    workspace: Workspace,
    collector: DependencyCollector,
) -> Dict[str, CollectionResult]:
    """Collect every project; no result lists its own project."""
    return {
        project.name: collector.collect(project)
        for project in workspace.all_projects()
    }


def resolve_dependencies(
    workspace: Workspace,
    collector: DependencyCollector,
    document: DependenciesDocument,
) -> Dict[str, CollectionResult]:
    """Collect every project and rewrite the dependencies document.

    Returns:
        Collection result per project name.
    """
    results = collect_workspace(workspace, collector)

    def _fill(name: str, entry: Dict[str, List[str]]) -> None:
        result = results.get(name)
        if result is None:
            return
        entry[DEPENDENCIES_KEY] = result.bundle_coordinates()
        entry[PROJECTS_KEY] = result.project_names()

    document.write(workspace.project_names(), _fill)
    return results


def clean_dependencies(workspace: Workspace, document: DependenciesDocument) -> None:
    """Reset the dependencies document to empty entries."""
    document.clean(workspace.project_names())


def collect_install_set(
    workspace: Workspace,
    collector: DependencyCollector,
) -> List[Bundle]:
    """Sorted, de-duplicated external bundles reached by the workspace."""
    return collector.collect_all(workspace.all_projects())


def new_collector(workspace: Workspace) -> DependencyCollector:
    """Collector backed by a fresh cache over the workspace registry."""
    registry = workspace.registry or BundleRegistry(workspace.all_projects())
    return DependencyCollector(ResolutionCache(registry))


def install_bundles(workspace: Workspace, release_to: Union[str, Path]) -> List[Path]:
    """Copy every project's bundle packaging to ``<release_to>/plugins``.

    Returns:
        Paths of the copied artifacts.

    Raises:
        FileOperationError: An artifact is missing or cannot be copied.
    """
    plugins = Path(release_to) / PLUGINS_DIR
    plugins.mkdir(parents=True, exist_ok=True)
    logger.info("Deploy directory: %s", plugins)

    deployed: List[Path] = []
    for project in workspace.projects:
        for packaging in project.packagings:
            logger.info("Deploying %s to %s", packaging.file, plugins)
            deployed.append(copy_file(packaging.file, plugins / packaging.file.name))

    return deployed
