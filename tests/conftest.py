from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

import pytest

from bundlekeeper.utils.logger import disable_logging


def _manifest_text(headers: Dict[str, str]) -> str:
    lines = ["Manifest-Version: 1.0"]
    lines.extend(f"{key}: {value}" for key, value in headers.items())
    return "\n".join(lines) + "\n\n"


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Detach handlers configured by CLI tests so caplog sees every record."""
    yield
    disable_logging()
    logging.getLogger("bundlekeeper").propagate = True


@pytest.fixture
def make_bundle_dir() -> Callable[..., Path]:
    """Create an exploded bundle directory with a manifest.

    Returns:
        Factory ``(parent, dirname, headers, files=None) -> Path``.
    """

    def _make(
        parent: Path,
        dirname: str,
        headers: Dict[str, str],
        files: Optional[Dict[str, bytes]] = None,
    ) -> Path:
        root = parent / dirname
        (root / "META-INF").mkdir(parents=True, exist_ok=True)
        (root / "META-INF" / "MANIFEST.MF").write_text(_manifest_text(headers))
        for name, data in (files or {}).items():
            target = root / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        return root

    return _make


@pytest.fixture
def make_jar() -> Callable[..., Path]:
    """Create a jar file, optionally with a manifest.

    Returns:
        Factory ``(path, headers=None, entries=None) -> Path``.
    """

    def _make(
        path: Path,
        headers: Optional[Dict[str, str]] = None,
        entries: Optional[Dict[str, bytes]] = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            if headers is not None:
                archive.writestr("META-INF/MANIFEST.MF", _manifest_text(headers))
            for name, data in (entries or {}).items():
                archive.writestr(name, data)
        return path

    return _make
