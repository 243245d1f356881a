"""Artifact repositories.

:class:`LocalRepository` is a Maven-layout directory tree (``~/.m2/repository``
by default). :class:`RemoteRepository` accepts artifacts over HTTP ``PUT``
at the same relative paths.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from bundlekeeper.models import ArtifactCoordinate
from bundlekeeper.utils import HTTPClient, copy_file, get_logger, remove_path, validate_path

logger = get_logger("repository")

# Public API
__all__ = ["LocalRepository", "RemoteRepository"]


class LocalRepository:
    """A repository on the local filesystem.

    Args:
        root: Repository root directory.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser()

    def locate(self, coordinate: ArtifactCoordinate) -> Path:
        """Path the artifact has (or would have) in this repository."""
        return validate_path(
            self.root.joinpath(*coordinate.repository_path.parts),
            base_dir=self.root,
        )

    def resolve(self, coordinate: ArtifactCoordinate) -> Optional[Path]:
        """Installed path of the artifact, or ``None`` if not installed."""
        path = self.locate(coordinate)
        return path if path.is_file() else None

    def remove(self, coordinate: ArtifactCoordinate) -> bool:
        """Delete an installed artifact; False when nothing was there."""
        return remove_path(self.locate(coordinate))

    def install(self, coordinate: ArtifactCoordinate, source: Union[str, Path]) -> Path:
        """Copy ``source`` into place for ``coordinate``."""
        installed = copy_file(source, self.locate(coordinate))
        logger.info("Installed %s", installed)
        return installed

    def __repr__(self) -> str:
        return f"LocalRepository({str(self.root)!r})"


class RemoteRepository:
    """A repository reachable over HTTP.

    Args:
        url: Base URL of the repository.
        http_client: Client used for uploads.
        username: Basic-auth user for uploads, if the repository needs one.
        password: Basic-auth password.
    """

    def __init__(
        self,
        url: str,
        http_client: HTTPClient,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.http_client = http_client
        self.auth: Optional[Tuple[str, str]] = (
            (username, password or "") if username else None
        )

    def url_for(self, coordinate: ArtifactCoordinate) -> str:
        return f"{self.url}/{coordinate.repository_path.as_posix()}"

    def upload(self, coordinate: ArtifactCoordinate, source: Union[str, Path]) -> str:
        """Upload ``source`` as ``coordinate``.

        Returns:
            The URL the artifact was uploaded to.

        Raises:
            NetworkError: The repository rejected the upload or could not
                be reached.
        """
        target = self.url_for(coordinate)
        request: Dict[str, Any] = {
            "content": Path(source).read_bytes(),
            "headers": {"Content-Type": "application/java-archive"},
        }
        if self.auth is not None:
            request["auth"] = self.auth

        self.http_client.put(target, **request)
        logger.info("Uploaded %s", coordinate)
        return target

    def __repr__(self) -> str:
        return f"RemoteRepository({self.url!r})"
