"""Transitive dependency collection.

:class:`DependencyCollector` walks the reference graph of a root (usually a
workspace project) and reports every external bundle and every workspace
project it reaches.

Rules of the walk:

1. **Projects are leaves.** A project reached through any reference is
   recorded and never expanded; its own closure comes from a separate
   :meth:`DependencyCollector.collect` call.
2. **Bundles expand once.** A bundle is recorded before its references are
   followed, and a bundle already recorded is not followed again. This
   guards against cycles and keeps diamonds from being expanded twice.
3. **Fragments ride with hosts.** Whenever a bundle is recorded, its
   attached fragments are recorded too (not expanded).
4. **Package imports pull in every provider.** No version or priority
   selection takes place.
5. **Missing references are skipped.** A dangling reference is not an
   error.

Each reference kind is expanded by a strategy that maps a reference to
zero or more resolved nodes; a single visitor then classifies the nodes,
so the cycle guard and fragment handling exist exactly once.

Typical usage::

    cache = ResolutionCache(registry)
    collector = DependencyCollector(cache)

    result = collector.collect(project)
    print(result.bundles, result.projects)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Tuple

from bundlekeeper.models import Bundle, Project, RefKind
from bundlekeeper.utils.logger import get_logger, trace
from bundlekeeper.core.cache import MISSING, ResolutionCache

logger = get_logger("collector")

# Public API
__all__ = ["CollectionResult", "DependencyCollector"]


@dataclass
class CollectionResult:
    """Bundles and projects reached from one root, in discovery order.

    Attributes:
        bundles: External bundles (fragments included), each at most once.
        projects: Workspace projects, each at most once.
    """

    bundles: List[Bundle] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    def without(self, project: Project) -> "CollectionResult":
        """Return a copy whose project list excludes ``project``."""
        return CollectionResult(
            bundles=list(self.bundles),
            projects=[p for p in self.projects if p != project],
        )

    def bundle_coordinates(self) -> List[str]:
        """Sorted, de-duplicated coordinate strings of the bundles."""
        return sorted({str(b) for b in self.bundles})

    def project_names(self) -> List[str]:
        """Sorted, de-duplicated names of the projects."""
        return sorted({p.name for p in self.projects})


class _Walk:
    """Visited state of a single collection; never shared between calls."""

    def __init__(self) -> None:
        self.bundles: Dict[Bundle, None] = {}
        self.projects: Dict[Project, None] = {}

    def add_project(self, project: Project) -> None:
        self.projects.setdefault(project, None)

    def add_bundle(self, bundle: Bundle) -> bool:
        """Record ``bundle`` and its fragments; False if already recorded."""
        if bundle in self.bundles:
            return False
        self.bundles[bundle] = None
        for fragment in bundle.fragments:
            self.bundles.setdefault(fragment, None)
        return True

    def result(self) -> CollectionResult:
        return CollectionResult(list(self.bundles), list(self.projects))


# Work items on the traversal stack: (True, reference) or (False, node)
_Item = Tuple[bool, Any]


class DependencyCollector:
    """Collects the transitive bundles and projects of a root.

    Args:
        cache: Resolution cache shared by every collection that should
            reuse resolutions.
    """

    def __init__(self, cache: ResolutionCache) -> None:
        self.cache = cache
        self._expanders: Dict[RefKind, Callable[[Any], List[Any]]] = {
            RefKind.BUNDLE: self._expand_resolvable,
            RefKind.PACKAGE: self._expand_resolvable,
            RefKind.PROJECT: self._expand_project,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def collect(self, root: Any) -> CollectionResult:
        """Collect everything reachable from ``root``'s manifest references.

        ``root`` must provide ``manifest_dependencies()``. The returned
        project list never contains ``root``, even when a cycle leads back
        to it.
        """
        logger.info("Collecting dependencies for %s", root)

        walk = _Walk()
        self._visit(root.manifest_dependencies(), walk)
        walk.projects.pop(root, None)
        result = walk.result()

        logger.info(
            "Done collecting dependencies for %s: %d bundle(s), %d project(s)",
            root,
            len(result.bundles),
            len(result.projects),
        )
        return result

    def collect_all(self, roots: Iterable[Any]) -> List[Bundle]:
        """Sorted, de-duplicated union of the bundles of several roots."""
        bundles: Dict[Bundle, None] = {}
        for root in roots:
            for bundle in self.collect(root).bundles:
                bundles.setdefault(bundle, None)
        return sorted(bundles)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _visit(self, references: Iterable[Any], walk: _Walk) -> None:
        """Depth-first walk in the same pre-order a recursive visit would use."""
        stack: List[_Item] = [(True, ref) for ref in reversed(list(references))]

        while stack:
            is_reference, item = stack.pop()

            if is_reference:
                nodes = self._expanders[item.kind](item)
                stack.extend((False, node) for node in reversed(nodes))
                continue

            if item.kind is RefKind.PROJECT:
                walk.add_project(item)
            elif walk.add_bundle(item):
                trace(logger, "Expanding %s", item)
                stack.extend((True, ref) for ref in reversed(item.references()))

    def _expand_resolvable(self, ref: Any) -> List[Any]:
        outcome = self.cache.resolve(ref)
        if outcome is MISSING:
            logger.debug("Skipping unresolved reference %s", ref)
            return []
        return outcome.candidates()

    @staticmethod
    def _expand_project(project: Project) -> List[Any]:
        return [project]
