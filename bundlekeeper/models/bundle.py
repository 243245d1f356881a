"""
Bundle data model for bundlekeeper.

A :class:`Bundle` is an external, already-built OSGi bundle: a jar file or
an exploded bundle directory, together with the dependencies declared in
its manifest. Bundles are built by the registry before collection starts
and are treated as immutable afterwards; only the registry attaches
fragments to their hosts.
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple

from bundlekeeper.constants import DEFAULT_GROUP
from bundlekeeper.models.coordinate import ArtifactCoordinate
from bundlekeeper.models.reference import BundleRef, PackageRef, RefKind
from bundlekeeper.utils.version_utils import OsgiVersion, safe_parse_version


@dataclass(eq=False)
class Bundle:
    """
    An external bundle artifact.

    Attributes:
        name: Bundle symbolic name.
        version: Bundle version string (``0.0.0`` when undeclared).
        file: Jar file or exploded directory backing the bundle.
        group: Repository group the bundle is installed under.
        requires: ``Require-Bundle`` references, in manifest order.
        imports: ``Import-Package`` references, in manifest order.
        exports: Names of exported packages.
        fragment_host: Host reference when this bundle is a fragment.
        fragments: Fragments attached to this bundle.
    """

    name: str
    version: str = "0.0.0"
    file: Optional[Path] = None
    group: str = DEFAULT_GROUP
    requires: List[BundleRef] = field(default_factory=list)
    imports: List[PackageRef] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    fragment_host: Optional[BundleRef] = None
    fragments: List["Bundle"] = field(default_factory=list, repr=False)

    kind: ClassVar[RefKind] = RefKind.BUNDLE

    def __post_init__(self) -> None:
        if self.file is not None:
            self.file = Path(self.file)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.name, self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bundle):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __lt__(self, other: "Bundle") -> bool:
        return str(self) < str(other)

    def __str__(self) -> str:
        return str(self.coordinate)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def coordinate(self) -> ArtifactCoordinate:
        """Repository coordinate of the bundle."""
        return ArtifactCoordinate(self.group, self.name, "jar", self.version)

    @property
    def parsed_version(self) -> OsgiVersion:
        return safe_parse_version(self.version)

    @property
    def is_fragment(self) -> bool:
        return self.fragment_host is not None

    @property
    def is_exploded(self) -> bool:
        """True when the bundle is backed by a directory rather than a jar."""
        return self.file is not None and self.file.is_dir()

    def references(self) -> List[object]:
        """Direct references to follow: required bundles, then imports."""
        return [*self.requires, *self.imports]

    def attach(self, fragment: "Bundle") -> None:
        """Attach ``fragment`` to this bundle (idempotent)."""
        if fragment not in self.fragments:
            self.fragments.append(fragment)
