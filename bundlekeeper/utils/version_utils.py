"""
Version utilities for bundlekeeper.

OSGi versions have the form ``major[.minor[.micro[.qualifier]]]``. The
numeric part is mapped onto a PEP 440 :class:`packaging.version.Version`
so comparisons reuse ``packaging``; the free-form qualifier is compared
as a plain string, as OSGi versions require.

Version ranges use interval notation (``[1.0,2.0)``) or a bare version,
which means "this version or later".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

_VERSION_RE = re.compile(r"^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.([\w-]+))?\s*$")
_RANGE_RE = re.compile(r"^\s*([\[(])\s*([^,]+?)\s*,\s*([^\])]+?)\s*([\])])\s*$")


@total_ordering
@dataclass(frozen=True)
class OsgiVersion:
    """A parsed OSGi version.

    Attributes:
        release: Numeric ``major.minor.micro`` part.
        qualifier: Qualifier string, empty when absent.
    """

    release: Version
    qualifier: str = ""

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OsgiVersion):
            return NotImplemented
        return (self.release, self.qualifier) < (other.release, other.qualifier)

    def __str__(self) -> str:
        text = str(self.release)
        return f"{text}.{self.qualifier}" if self.qualifier else text


#: Lowest possible version; the implied floor of unversioned bundles.
EMPTY_VERSION = OsgiVersion(Version("0.0.0"))


def parse_version(value: Optional[str]) -> OsgiVersion:
    """Parse an OSGi version string.

    ``None`` or blank input yields :data:`EMPTY_VERSION`.

    Raises:
        InvalidVersion: The text is not an OSGi version.

    Examples:
        >>> str(parse_version("1.2"))
        '1.2.0'
        >>> parse_version("3.4.0.v20091120") > parse_version("3.4.0")
        True
    """
    if value is None or not value.strip():
        return EMPTY_VERSION

    match = _VERSION_RE.match(value)
    if not match:
        raise InvalidVersion(value)

    major, minor, micro, qualifier = match.groups()
    release = Version(f"{int(major)}.{int(minor or 0)}.{int(micro or 0)}")
    return OsgiVersion(release, qualifier or "")


def safe_parse_version(value: Optional[str]) -> OsgiVersion:
    """Like :func:`parse_version` but maps invalid input to the empty version."""
    try:
        return parse_version(value)
    except InvalidVersion:
        return EMPTY_VERSION


@dataclass(frozen=True)
class VersionRange:
    """An OSGi version interval.

    Attributes:
        floor: Lower bound.
        ceiling: Upper bound, ``None`` for unbounded.
        include_floor: Whether ``floor`` itself matches.
        include_ceiling: Whether ``ceiling`` itself matches.
    """

    floor: OsgiVersion = EMPTY_VERSION
    ceiling: Optional[OsgiVersion] = None
    include_floor: bool = True
    include_ceiling: bool = False

    @classmethod
    def parse(cls, value: Optional[str]) -> "VersionRange":
        """Parse ``[a,b)``-style ranges or a bare minimum version."""
        if value is None or not value.strip():
            return cls()

        text = value.strip().strip('"')
        match = _RANGE_RE.match(text)
        if match:
            left, low, high, right = match.groups()
            return cls(
                floor=parse_version(low),
                ceiling=parse_version(high),
                include_floor=left == "[",
                include_ceiling=right == "]",
            )

        return cls(floor=parse_version(text))

    def includes(self, version: Union[str, OsgiVersion, None]) -> bool:
        """Return True if ``version`` lies within this range."""
        if not isinstance(version, OsgiVersion):
            version = safe_parse_version(version)

        if version < self.floor or (version == self.floor and not self.include_floor):
            return False

        if self.ceiling is None:
            return True

        if version > self.ceiling:
            return False
        return version != self.ceiling or self.include_ceiling

    def __str__(self) -> str:
        if self.ceiling is None:
            return str(self.floor)
        left = "[" if self.include_floor else "("
        right = "]" if self.include_ceiling else ")"
        return f"{left}{self.floor},{self.ceiling}{right}"
