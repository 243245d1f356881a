"""
Reference models for bundlekeeper.

A manifest names its dependencies symbolically: ``Require-Bundle`` clauses
become :class:`BundleRef` and ``Import-Package`` clauses become
:class:`PackageRef`. Every node the collector may encounter carries a
:class:`RefKind` tag so traversal dispatches on the tag instead of on
runtime types.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import ClassVar, Optional

from bundlekeeper.utils.version_utils import VersionRange


class RefKind(Enum):
    """What a node in the dependency graph stands for."""

    BUNDLE = "bundle"
    PACKAGE = "package"
    PROJECT = "project"


@dataclass(frozen=True)
class _Reference:
    name: str
    version_range: Optional[str] = None
    optional: bool = False

    kind: ClassVar[RefKind]

    @property
    def range(self) -> VersionRange:
        """Parsed version constraint (unbounded when absent)."""
        return VersionRange.parse(self.version_range)

    def __str__(self) -> str:
        if self.version_range:
            return f"{self.name};version={self.version_range}"
        return self.name


@dataclass(frozen=True)
class BundleRef(_Reference):
    """A reference to a bundle by symbolic name and version range."""

    kind: ClassVar[RefKind] = RefKind.BUNDLE


@dataclass(frozen=True)
class PackageRef(_Reference):
    """A reference to an exported package, satisfied by any provider."""

    kind: ClassVar[RefKind] = RefKind.PACKAGE
