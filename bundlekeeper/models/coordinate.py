"""
Repository coordinates.

Artifacts are addressed the Maven way, ``group:id:type[:classifier]:version``,
and stored under ``group/with/slashes/id/version/id-version[-classifier].type``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional


@dataclass(frozen=True, order=True)
class ArtifactCoordinate:
    """Identity of an artifact inside a repository."""

    group: str
    artifact_id: str
    type: str = "jar"
    version: str = "0.0.0"
    classifier: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "ArtifactCoordinate":
        """Parse ``group:id:type[:classifier]:version``.

        Raises:
            ValueError: The text does not have four or five parts.
        """
        parts = text.strip().split(":")
        if len(parts) == 4:
            group, artifact_id, type_, version = parts
            return cls(group, artifact_id, type_, version)
        if len(parts) == 5:
            group, artifact_id, type_, classifier, version = parts
            return cls(group, artifact_id, type_, version, classifier)
        raise ValueError(f"Invalid artifact coordinate: {text!r}")

    @property
    def filename(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.type}"

    @property
    def repository_path(self) -> PurePosixPath:
        """Relative path of the artifact inside a Maven-layout repository."""
        return PurePosixPath(
            *self.group.split("."), self.artifact_id, self.version, self.filename
        )

    def __str__(self) -> str:
        parts = [self.group, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)
