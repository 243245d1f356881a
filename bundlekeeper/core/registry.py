"""Reference resolution against the workspace and the target platform.

:class:`BundleRegistry` knows every workspace project and every external
bundle available to the build, and answers the question "what satisfies
this reference?" for the :class:`~bundlekeeper.core.cache.ResolutionCache`.

- Bundle references prefer a workspace project of the same name, then the
  highest external bundle version inside the reference's version range.
- Package references return *every* project and bundle exporting the
  package. Version attributes on imports are ignored on purpose.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from bundlekeeper.utils import get_logger
from bundlekeeper.core.manifest import ManifestParser
from bundlekeeper.constants import BUNDLE_ARCHIVE_SUFFIXES, DEFAULT_GROUP
from bundlekeeper.models import Bundle, BundleRef, PackageRef, Project, RefKind

logger = get_logger("registry")

# Public API
__all__ = ["BundleRegistry"]

Node = Union[Bundle, Project]


class BundleRegistry:
    """Index of projects and external bundles, keyed for resolution.

    Fragments are attached to every registered bundle matching their
    ``Fragment-Host`` when the registry is built and whenever bundles are
    added later.

    Args:
        projects: Workspace projects.
        bundles: External bundles (fragments included).
    """

    def __init__(
        self,
        projects: Iterable[Project] = (),
        bundles: Iterable[Bundle] = (),
    ) -> None:
        self._projects: Dict[str, Project] = {}
        self._bundles: Dict[str, List[Bundle]] = {}

        for project in projects:
            self.add_project(project)
        self.add_bundles(bundles)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_project(self, project: Project) -> None:
        self._projects[project.name] = project

    def add_bundles(self, bundles: Iterable[Bundle]) -> None:
        """Register bundles and attach fragments to their hosts."""
        added = list(bundles)
        for bundle in added:
            versions = self._bundles.setdefault(bundle.name, [])
            if bundle not in versions:
                versions.append(bundle)

        for fragment in self._all_bundles():
            if fragment.fragment_host is None:
                continue
            host_range = fragment.fragment_host.range
            for host in self._bundles.get(fragment.fragment_host.name, []):
                if host_range.includes(host.parsed_version):
                    host.attach(fragment)

    def scan(self, paths: Iterable[Union[str, Path]], group: str = DEFAULT_GROUP) -> int:
        """Register the bundles found in the given directories.

        Every jar and every directory containing ``META-INF/MANIFEST.MF``
        directly under a scanned directory is read; entries without a
        ``Bundle-SymbolicName`` are ignored.

        Returns:
            Number of bundles found.
        """
        parser = ManifestParser(group)
        locations = list(paths)
        found: List[Bundle] = []

        for base in locations:
            base_path = Path(base).expanduser()
            if not base_path.is_dir():
                logger.warning("Bundle path does not exist: %s", base_path)
                continue

            for entry in sorted(base_path.iterdir()):
                if entry.is_file() and entry.suffix not in BUNDLE_ARCHIVE_SUFFIXES:
                    continue
                bundle = parser.read_bundle(entry)
                if bundle is not None:
                    found.append(bundle)

        logger.info("Found %d bundle(s) in %d location(s)", len(found), len(locations))
        self.add_bundles(found)
        return len(found)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def projects(self) -> List[Project]:
        return list(self._projects.values())

    @property
    def bundles(self) -> List[Bundle]:
        return self._all_bundles()

    def _all_bundles(self) -> List[Bundle]:
        return [b for versions in self._bundles.values() for b in versions]

    def resolve(self, ref: Any) -> Union[Node, List[Node], None]:
        """Resolve a bundle or package reference."""
        if ref.kind is RefKind.BUNDLE:
            return self.resolve_bundle(ref)
        if ref.kind is RefKind.PACKAGE:
            return self.resolve_package(ref)
        return ref

    def resolve_bundle(self, ref: BundleRef) -> Optional[Node]:
        """Workspace project named ``ref.name``, else best matching bundle."""
        project = self._projects.get(ref.name)
        if project is not None:
            return project

        version_range = ref.range
        matching = [
            b for b in self._bundles.get(ref.name, []) if version_range.includes(b.parsed_version)
        ]
        if not matching:
            return None
        return max(matching, key=lambda b: b.parsed_version)

    def resolve_package(self, ref: PackageRef) -> List[Node]:
        """Every project and bundle exporting ``ref.name``."""
        providers: List[Node] = [p for p in self._projects.values() if ref.name in p.exports]
        providers.extend(b for b in self._all_bundles() if ref.name in b.exports)
        return providers
