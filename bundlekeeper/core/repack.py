"""Repacking of exploded bundles.

Repositories store bundles as single jar files, but a target platform
often ships bundles as directories, sometimes with library jars nested
inside (``Bundle-ClassPath`` entries). :func:`repack_directory` turns such
a directory into one jar and flattens nested jars one level, so their
classes become directly readable by compilers that do not understand
bundle class paths.
"""

from __future__ import annotations

import re
import zipfile
from pathlib import Path
from typing import List, Pattern, Set, Union

from bundlekeeper.utils import get_logger, iter_files, remove_path
from bundlekeeper.utils.logger import trace
from bundlekeeper.constants import ARCHIVE_ENTRY_TIMESTAMP, NESTED_ARCHIVE_PATTERN

logger = get_logger("repack")

# Public API
__all__ = ["repack_directory"]


def repack_directory(
    directory: Union[str, Path],
    target: Union[str, Path],
    nested_pattern: Union[str, Pattern[str]] = NESTED_ARCHIVE_PATTERN,
) -> Path:
    """Pack ``directory`` into a single jar at ``target``.

    - A stale ``target`` is removed first.
    - Every file not matching ``nested_pattern`` is stored at its path
      relative to ``directory``.
    - Files matching ``nested_pattern`` are then opened as archives and
      each of their file entries is written at its own entry name; the
      nested archive itself is not stored.

    The directory's own files always win over nested entries of the same
    name, so the bundle manifest survives nested jars that carry their own.
    Between nested archives the first one in sorted order wins. Entries get
    a fixed timestamp, so repacking the same directory twice produces the
    same content.

    Returns:
        Path of the new archive.

    Raises:
        zipfile.BadZipFile: A nested archive is corrupt.
        OSError: Reading the directory or writing the target failed.
    """
    base = Path(directory)
    output = Path(target)
    pattern = re.compile(nested_pattern) if isinstance(nested_pattern, str) else nested_pattern

    remove_path(output)
    output.parent.mkdir(parents=True, exist_ok=True)

    written: Set[str] = set()

    with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED) as archive:

        def _store(name: str, data: bytes) -> None:
            if name in written:
                logger.debug("Skipping duplicate entry %s in %s", name, output.name)
                return
            info = zipfile.ZipInfo(name, date_time=ARCHIVE_ENTRY_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, data)
            written.add(name)

        nested_archives: List[Path] = []
        for path in iter_files(base):
            if pattern.match(path.name):
                nested_archives.append(path)
            else:
                _store(path.relative_to(base).as_posix(), path.read_bytes())

        for path in nested_archives:
            trace(logger, "Flattening nested archive %s", path)
            with zipfile.ZipFile(path) as nested:
                for entry in nested.infolist():
                    if entry.is_dir():
                        continue
                    _store(entry.filename, nested.read(entry))

    logger.debug("Repacked %s into %s (%d entries)", base, output, len(written))
    return output
