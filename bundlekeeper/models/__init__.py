"""
Unified data model exports for bundlekeeper.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``bundlekeeper.models`` instead of individual submodules.

Example:
    >>> from bundlekeeper.models import Bundle, BundleRef, Project
"""

from __future__ import annotations

from bundlekeeper.models.bundle import Bundle
from bundlekeeper.models.coordinate import ArtifactCoordinate
from bundlekeeper.models.project import BundlePackaging, Project
from bundlekeeper.models.reference import BundleRef, PackageRef, RefKind

__all__ = [
    "ArtifactCoordinate",
    "Bundle",
    "BundlePackaging",
    "BundleRef",
    "PackageRef",
    "Project",
    "RefKind",
]
