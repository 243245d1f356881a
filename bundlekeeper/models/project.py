"""
Project data model for bundlekeeper.

A :class:`Project` is a buildable unit of the workspace. During a bundle
walk it is a terminal node: its own closure is computed by a separate
collection, never inline.
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Dict, List, Optional

from bundlekeeper.exceptions import UnsupportedConfigurationError
from bundlekeeper.models.reference import BundleRef, PackageRef, RefKind

if TYPE_CHECKING:
    from bundlekeeper.core.document import DependenciesDocument


@dataclass(frozen=True)
class BundlePackaging:
    """A bundle artifact produced by a project.

    Attributes:
        file: Path of the packaged bundle (usually under ``target/``).
        manifest: Manifest headers contributed by the packaging; they
            override the project's ``META-INF/MANIFEST.MF``.
    """

    file: Path
    manifest: Dict[str, str] = field(default_factory=dict, hash=False)


@dataclass(eq=False)
class Project:
    """
    A workspace project.

    Attributes:
        name: Project name; also the symbolic name other bundles require.
        base_dir: Project directory.
        version: Declared bundle version.
        requires: ``Require-Bundle`` references from the project manifest.
        imports: ``Import-Package`` references from the project manifest.
        exports: Packages exported by the project.
        packagings: Bundle artifacts the project packages.
    """

    name: str
    base_dir: Path = field(default_factory=Path)
    version: str = "0.0.0"
    requires: List[BundleRef] = field(default_factory=list)
    imports: List[PackageRef] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    packagings: List[BundlePackaging] = field(default_factory=list)

    kind: ClassVar[RefKind] = RefKind.PROJECT

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(("project", self.name))

    def __lt__(self, other: "Project") -> bool:
        return self.name < other.name

    def __str__(self) -> str:
        return self.name

    def path_to(self, *parts: str) -> Path:
        return self.base_dir.joinpath(*parts)

    def manifest_dependencies(self) -> List[object]:
        """Direct references declared by the project manifest, in order."""
        return [*self.requires, *self.imports]

    def dependencies(self, document: "DependenciesDocument") -> List[str]:
        """Persisted dependencies of this project.

        Reads the dependencies document; no graph walk happens here.

        Returns:
            Sorted union of the project's bundle coordinates and the names
            of the projects it depends on.
        """
        return document.dependencies(self.name)

    def bundle_packaging(self) -> Optional[BundlePackaging]:
        """Return the project's single bundle packaging, if any.

        Raises:
            UnsupportedConfigurationError: More than one is defined.
        """
        if len(self.packagings) > 1:
            raise UnsupportedConfigurationError(
                f"More than one bundle packaging is defined over the project {self.name}",
                project=self.name,
            )
        return self.packagings[0] if self.packagings else None
