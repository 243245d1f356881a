"""
Core functionality exports for bundlekeeper.

This module provides convenient access to the core subsystems of
bundlekeeper. Importing from here keeps user-facing imports clean and
stable:

    from bundlekeeper.core import DependencyCollector, ResolutionCache
"""

from __future__ import annotations

from bundlekeeper.core.cache import MISSING, Resolved, ResolutionCache
from bundlekeeper.core.manifest import ManifestParser
from bundlekeeper.core.registry import BundleRegistry
from bundlekeeper.core.document import DependenciesDocument
from bundlekeeper.core.collector import CollectionResult, DependencyCollector
from bundlekeeper.core.repack import repack_directory
from bundlekeeper.core.repository import LocalRepository, RemoteRepository
from bundlekeeper.core.installer import (
    InstallationPipeline,
    InstallFailure,
    InstallMode,
    InstallReport,
)
from bundlekeeper.core.workspace import (
    Workspace,
    clean_dependencies,
    collect_install_set,
    install_bundles,
    load_workspace,
    new_collector,
    resolve_dependencies,
)

__all__ = [
    "MISSING",
    "Resolved",
    "ResolutionCache",
    "ManifestParser",
    "BundleRegistry",
    "DependenciesDocument",
    "CollectionResult",
    "DependencyCollector",
    "repack_directory",
    "LocalRepository",
    "RemoteRepository",
    "InstallationPipeline",
    "InstallFailure",
    "InstallMode",
    "InstallReport",
    "Workspace",
    "clean_dependencies",
    "collect_install_set",
    "install_bundles",
    "load_workspace",
    "new_collector",
    "resolve_dependencies",
]
