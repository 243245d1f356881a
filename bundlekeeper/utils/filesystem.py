"""
Filesystem utilities for bundlekeeper.

This module provides safe helpers for reading and atomically writing text
files, copying artifacts into place and removing previously installed
artifacts. All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Union

from bundlekeeper.utils.logger import get_logger
from bundlekeeper.exceptions import FileOperationError


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Validate and resolve an existing file path."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        temp_path.replace(target)

    except Exception as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(file_path: PathLike, *, encoding: str = "utf-8") -> str:
    """Read a text file, normalizing errors to ``FileOperationError``."""
    path = _validated_file(Path(file_path))

    try:
        return path.read_text(encoding=encoding)
    except Exception as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> Path:
    """Replace ``file_path`` with ``content`` in a single atomic step.

    Returns:
        The written path.
    """
    path = Path(file_path)
    _atomic_write(path, content)
    return path


def remove_path(path: PathLike) -> bool:
    """Remove a file or a directory tree if present.

    Returns:
        ``True`` when something was removed.
    """
    target = Path(path)
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
        else:
            return False
    except OSError as exc:
        raise FileOperationError(
            f"Failed to remove {target}: {exc}",
            file_path=str(target),
            operation="delete",
            original_error=exc,
        ) from exc

    logger.debug("Removed %s", target)
    return True


def copy_file(source: PathLike, destination: PathLike) -> Path:
    """Copy ``source`` to ``destination``, creating parent directories.

    If ``destination`` is an existing directory the file keeps its name.
    """
    src = _validated_file(Path(source))
    dst = Path(destination)
    if dst.is_dir():
        dst = dst / src.name

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to copy {src} to {dst}: {exc}",
            file_path=str(dst),
            operation="copy",
            original_error=exc,
        ) from exc

    return dst


def iter_files(directory: PathLike) -> Iterator[Path]:
    """Yield every regular file below ``directory`` in sorted order."""
    root = Path(directory)
    for path in sorted(root.rglob("*")):
        if path.is_file():
            yield path


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve and validate a filesystem path.

    If ``base_dir`` is provided, the resolved path must be within it.
    """
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).expanduser().resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"Path outside allowed base directory: {resolved}",
                file_path=str(path),
                operation="validate",
            )

    return resolved
