"""Memoized reference resolution.

Resolving a reference means asking the registry which workspace project or
external bundle(s) satisfy it. The answer never changes within a run, so
:class:`ResolutionCache` asks at most once per reference and keeps the
outcome for as long as the cache instance lives. The cache is an explicit
object handed to each :class:`~bundlekeeper.core.collector.DependencyCollector`;
share one instance to share results across collections.

Typical usage::

    registry = BundleRegistry(projects, bundles)
    cache = ResolutionCache(registry)

    outcome = cache.resolve(BundleRef("org.example.core"))
    if outcome is not MISSING:
        for node in outcome.candidates():
            ...
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Protocol, Union

from bundlekeeper.utils.logger import get_logger, trace

logger = get_logger("cache")

# Public API
__all__ = ["MISSING", "Missing", "Resolved", "Resolution", "ResolutionCache", "Resolver"]


class Resolver(Protocol):
    """Anything able to resolve a reference (the registry, in practice)."""

    def resolve(self, ref: Any) -> Any: ...


class Missing:
    """Marker for references that resolve to nothing."""

    _instance = None

    def __new__(cls) -> "Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


#: The single :class:`Missing` instance.
MISSING = Missing()


@dataclass(frozen=True)
class Resolved:
    """A successful resolution.

    Attributes:
        value: A single node for bundle references, a list of candidate
            providers for package references.
    """

    value: Any

    def candidates(self) -> List[Any]:
        """Resolved nodes as a list, whatever the reference kind."""
        if isinstance(self.value, (list, tuple)):
            return list(self.value)
        return [self.value]


Resolution = Union[Resolved, Missing]


class ResolutionCache:
    """Process-lifetime memo of reference resolutions.

    Each distinct reference is handed to the resolver exactly once; later
    lookups return the stored outcome. ``None`` and empty results are both
    stored as :data:`MISSING`. The load-or-compute step holds a lock, so
    concurrent lookups of the same reference still resolve it only once.

    Args:
        resolver: Collaborator whose ``resolve(ref)`` performs the actual
            lookup.
    """

    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver
        self._entries: Dict[Hashable, Resolution] = {}
        self._lock = threading.Lock()

    def resolve(self, ref: Hashable) -> Resolution:
        """Return the cached outcome for ``ref``, resolving it on first use."""
        # Fast path, no lock needed for a hit
        if ref in self._entries:
            return self._entries[ref]

        with self._lock:
            if ref in self._entries:
                return self._entries[ref]

            value = self.resolver.resolve(ref)
            outcome: Resolution
            if value is None or (isinstance(value, (list, tuple)) and not value):
                outcome = MISSING
            else:
                outcome = Resolved(value)

            trace(logger, "Resolving %s: %s", ref, _describe(outcome))
            self._entries[ref] = outcome
            return outcome

    def __contains__(self, ref: Hashable) -> bool:
        return ref in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Forget every stored resolution."""
        with self._lock:
            self._entries.clear()


def _describe(outcome: Resolution) -> str:
    if outcome is MISSING:
        return "missing"
    assert isinstance(outcome, Resolved)
    return ", ".join(str(node) for node in outcome.candidates())
