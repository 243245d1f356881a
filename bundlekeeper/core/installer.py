"""Installation of resolved bundles into a repository.

:class:`InstallationPipeline` takes the sorted, de-duplicated set of
external bundles reached by a workspace and publishes each of them, either
into a local repository or to a remote one. Exploded (directory) bundles
are repacked into a temporary jar first.

Failures are isolated per bundle: the error is logged with the bundle's
coordinate, recorded once in the :class:`InstallReport`, and the pipeline
moves on to the next bundle.

Typical usage::

    pipeline = InstallationPipeline(InstallMode.INSTALL, local=LocalRepository(root))
    report = pipeline.run(collector.collect_all(workspace.all_projects()))
    for failure in report.failures:
        print(failure.bundle, failure.error)
"""

from __future__ import annotations

import re
import tempfile
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from bundlekeeper.models import Bundle
from bundlekeeper.utils import get_logger
from bundlekeeper.core.repack import repack_directory
from bundlekeeper.constants import NESTED_ARCHIVE_PATTERN
from bundlekeeper.exceptions import InstallError, InvalidOptionError
from bundlekeeper.core.repository import LocalRepository, RemoteRepository

logger = get_logger("installer")

# Public API
__all__ = [
    "InstallFailure",
    "InstallMode",
    "InstallReport",
    "InstallationPipeline",
]


class InstallMode(Enum):
    """Where a pipeline publishes bundles."""

    INSTALL = "install"  # local repository
    UPLOAD = "upload"  # remote repository


@dataclass
class InstallFailure:
    """A bundle that could not be published.

    Attributes:
        bundle: The bundle involved.
        error: The exception raised while repacking or publishing it.
    """

    bundle: Bundle
    error: BaseException

    def __str__(self) -> str:
        return f"{self.bundle}: {self.error}"


@dataclass
class InstallReport:
    """Outcome of a pipeline run.

    Attributes:
        mode: Publishing mode of the run.
        published: Bundles successfully installed or uploaded, in order.
        failures: One entry per bundle that failed.
    """

    mode: InstallMode
    published: List[Bundle] = field(default_factory=list)
    failures: List[InstallFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def rows(self) -> List[dict]:
        """Table rows (bundle, status, detail) for console output."""
        status = "installed" if self.mode is InstallMode.INSTALL else "uploaded"
        rows = [{"Bundle": str(b), "Status": status, "Detail": ""} for b in self.published]
        rows.extend(
            {"Bundle": str(f.bundle), "Status": "failed", "Detail": str(f.error)}
            for f in self.failures
        )
        return rows


class InstallationPipeline:
    """Repacks and publishes bundles one at a time.

    Args:
        mode: Publish into ``local`` (:attr:`InstallMode.INSTALL`) or to
            ``remote`` (:attr:`InstallMode.UPLOAD`) for the whole run.
        local: Local repository, required for ``INSTALL``.
        remote: Remote repository, required for ``UPLOAD``.
        temp_dir: Directory receiving repacked jars (system temp dir by
            default).
        nested_pattern: Regular expression matched against file names to
            detect nested archives while repacking.

    Raises:
        ValueError: The repository required by ``mode`` is missing.
    """

    OPTIONS = ("temp_dir", "nested_pattern")

    def __init__(
        self,
        mode: InstallMode,
        *,
        local: Optional[LocalRepository] = None,
        remote: Optional[RemoteRepository] = None,
        temp_dir: Optional[Union[str, Path]] = None,
        nested_pattern: str = NESTED_ARCHIVE_PATTERN,
    ) -> None:
        if mode is InstallMode.INSTALL and local is None:
            raise ValueError("A local repository is required to install bundles")
        if mode is InstallMode.UPLOAD and remote is None:
            raise ValueError("A remote repository is required to upload bundles")

        self.mode = mode
        self.local = local
        self.remote = remote
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
        self.nested_pattern = re.compile(nested_pattern)

    def set_options(self, **options: Any) -> None:
        """Update pipeline options.

        Raises:
            InvalidOptionError: An option name is not one of :attr:`OPTIONS`.
        """
        for name in options:
            if name not in self.OPTIONS:
                raise InvalidOptionError(
                    f"Unknown option {name!r}; expected one of {', '.join(self.OPTIONS)}",
                    option=name,
                )

        if "temp_dir" in options:
            self.temp_dir = Path(options["temp_dir"])
        if "nested_pattern" in options:
            self.nested_pattern = re.compile(options["nested_pattern"])

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run(self, bundles: Iterable[Bundle]) -> InstallReport:
        """Publish every bundle in order; never stops on a single failure."""
        report = InstallReport(self.mode)

        for bundle in bundles:
            try:
                self.process(bundle)
            except Exception as exc:
                logger.error("Error installing the artifact %s: %s", bundle, exc)
                logger.debug("Traceback for %s", bundle, exc_info=True)
                report.failures.append(InstallFailure(bundle, exc))
            else:
                report.published.append(bundle)

        logger.info(
            "%d bundle(s) published, %d failed",
            len(report.published),
            len(report.failures),
        )
        return report

    def process(self, bundle: Bundle) -> None:
        """Repack (when exploded) and publish a single bundle."""
        source = self.prepare(bundle)

        if self.mode is InstallMode.INSTALL:
            assert self.local is not None
            # Replace any previous install
            self.local.remove(bundle.coordinate)
            self.local.install(bundle.coordinate, source)
        else:
            assert self.remote is not None
            self.remote.upload(bundle.coordinate, source)

    def prepare(self, bundle: Bundle) -> Path:
        """Return the file to publish for ``bundle``, repacking if needed.

        Raises:
            InstallError: The bundle has no backing file.
        """
        if bundle.file is None or not bundle.file.exists():
            raise InstallError(
                f"No artifact file for {bundle}",
                bundle=str(bundle),
            )

        if not bundle.file.is_dir():
            return bundle.file

        target = self.temp_dir / f"{bundle.file.name}.jar"
        return repack_directory(bundle.file, target, self.nested_pattern)
