"""
bundlekeeper: OSGi bundle dependency resolution for multi-project workspaces

bundlekeeper walks the Require-Bundle / Import-Package graph of every
project in a workspace, records the result in ``dependencies.yml`` and
installs or uploads the external bundles it found to a Maven-layout
repository.

Features include:
    • Transitive, cycle-safe collection with memoized resolution
    • Fragment attachment to host bundles
    • Repacking of exploded bundles with nested jars
    • Local install or remote upload with per-bundle failure isolation
"""

from __future__ import annotations

from bundlekeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "bundlekeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Transitive OSGi bundle resolution and installation for workspaces."

__all__ = [
    "__version__",
]
