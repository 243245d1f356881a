"""Bundle manifest reader.

Reads ``META-INF/MANIFEST.MF`` from exploded bundle directories, bundle
jars and workspace projects, and turns the OSGi headers into bundlekeeper
models:

- ``Require-Bundle`` → :class:`~bundlekeeper.models.BundleRef`
- ``Import-Package`` → :class:`~bundlekeeper.models.PackageRef`
- ``Export-Package`` → exported package names
- ``Fragment-Host`` → host reference of a fragment

Typical usage::

    from bundlekeeper.core.manifest import ManifestParser

    parser = ManifestParser()
    bundle = parser.read_bundle(Path("plugins/org.example.core_1.0.0.jar"))
    for ref in bundle.requires:
        print(ref)
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from bundlekeeper.utils import get_logger, safe_read_file
from bundlekeeper.exceptions import ManifestError
from bundlekeeper.constants import DEFAULT_GROUP, MANIFEST_HEADERS, MANIFEST_PATH
from bundlekeeper.models import Bundle, BundlePackaging, BundleRef, PackageRef, Project

logger = get_logger("manifest")

#: One parsed header clause: names, attributes (``a=v``), directives (``d:=v``).
Clause = Tuple[List[str], Dict[str, str], Dict[str, str]]


# ---------------------------------------------------------------------------
# Low-level syntax
# ---------------------------------------------------------------------------


def _split_outside_quotes(text: str, separator: str) -> List[str]:
    """Split ``text`` on ``separator`` ignoring separators inside quotes."""
    parts: List[str] = []
    current: List[str] = []
    quoted = False

    for char in text:
        if char == '"':
            quoted = not quoted
        if char == separator and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))

    return [p.strip() for p in parts if p.strip()]


def parse_clauses(value: Optional[str]) -> List[Clause]:
    """Parse an OSGi header value into clauses.

    Example::

        >>> parse_clauses('org.a;version="[1.0,2.0)";resolution:=optional')
        [(['org.a'], {'version': '[1.0,2.0)'}, {'resolution': 'optional'})]
    """
    if not value:
        return []

    clauses: List[Clause] = []
    for raw_clause in _split_outside_quotes(value, ","):
        names: List[str] = []
        attributes: Dict[str, str] = {}
        directives: Dict[str, str] = {}

        for part in _split_outside_quotes(raw_clause, ";"):
            if ":=" in part:
                key, _, val = part.partition(":=")
                directives[key.strip()] = val.strip().strip('"')
            elif "=" in part:
                key, _, val = part.partition("=")
                attributes[key.strip()] = val.strip().strip('"')
            else:
                names.append(part)

        clauses.append((names, attributes, directives))

    return clauses


# ---------------------------------------------------------------------------
# Header interpretation
# ---------------------------------------------------------------------------


def bundle_references(headers: Mapping[str, str]) -> List[BundleRef]:
    """``Require-Bundle`` entries as bundle references."""
    refs: List[BundleRef] = []
    for names, attributes, directives in parse_clauses(
        headers.get(MANIFEST_HEADERS["require_bundle"])
    ):
        for name in names:
            refs.append(
                BundleRef(
                    name,
                    attributes.get("bundle-version"),
                    directives.get("resolution") == "optional",
                )
            )
    return refs


def package_references(headers: Mapping[str, str]) -> List[PackageRef]:
    """``Import-Package`` entries as package references."""
    refs: List[PackageRef] = []
    for names, attributes, directives in parse_clauses(
        headers.get(MANIFEST_HEADERS["import_package"])
    ):
        for name in names:
            refs.append(
                PackageRef(
                    name,
                    attributes.get("version"),
                    directives.get("resolution") == "optional",
                )
            )
    return refs


def exported_packages(headers: Mapping[str, str]) -> List[str]:
    """Names listed in ``Export-Package``."""
    exports: List[str] = []
    for names, _, _ in parse_clauses(headers.get(MANIFEST_HEADERS["export_package"])):
        exports.extend(names)
    return exports


def fragment_host(headers: Mapping[str, str]) -> Optional[BundleRef]:
    """Host reference declared by ``Fragment-Host``, if any."""
    clauses = parse_clauses(headers.get(MANIFEST_HEADERS["fragment_host"]))
    if not clauses or not clauses[0][0]:
        return None
    names, attributes, _ = clauses[0]
    return BundleRef(names[0], attributes.get("bundle-version"))


def symbolic_name(headers: Mapping[str, str]) -> Optional[str]:
    """Bundle symbolic name without directives (``singleton:=true``)."""
    clauses = parse_clauses(headers.get(MANIFEST_HEADERS["symbolic_name"]))
    if not clauses or not clauses[0][0]:
        return None
    return clauses[0][0][0]


def execution_environment_names(headers: Mapping[str, str]) -> List[str]:
    """Names listed in ``Bundle-RequiredExecutionEnvironment``."""
    names: List[str] = []
    for clause_names, _, _ in parse_clauses(
        headers.get(MANIFEST_HEADERS["execution_environment"])
    ):
        names.extend(clause_names)
    return names


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class ManifestParser:
    """Reads manifests and builds bundles and projects from them.

    Args:
        group: Repository group assigned to the bundles it builds.
    """

    def __init__(self, group: str = DEFAULT_GROUP) -> None:
        self.group = group

    def parse_string(self, text: str, *, location: Optional[str] = None) -> Dict[str, str]:
        """Parse the main section of a manifest.

        Continuation lines (starting with a single space) are joined to the
        previous header. Parsing stops at the first blank line.

        Raises:
            ManifestError: A line is neither a header nor a continuation.
        """
        headers: Dict[str, str] = {}
        current: Optional[str] = None

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.rstrip("\r")

            if not line.strip():
                if headers:
                    break
                continue

            if line.startswith(" "):
                if current is None:
                    raise ManifestError(
                        "Continuation line without a header",
                        line_number=line_number,
                        line_content=line,
                        location=location,
                    )
                headers[current] += line[1:]
                continue

            name, sep, value = line.partition(":")
            if not sep or not name.strip():
                raise ManifestError(
                    "Malformed manifest header",
                    line_number=line_number,
                    line_content=line,
                    location=location,
                )
            current = name.strip()
            headers[current] = value.strip()

        return headers

    def read(self, location: Path) -> Optional[Dict[str, str]]:
        """Read the manifest of a bundle directory or jar.

        Returns:
            Parsed headers, or ``None`` if the location has no manifest.
        """
        location = Path(location)

        if location.is_dir():
            manifest = location / MANIFEST_PATH
            if not manifest.is_file():
                return None
            return self.parse_string(safe_read_file(manifest), location=str(location))

        if location.is_file() and zipfile.is_zipfile(location):
            with zipfile.ZipFile(location) as archive:
                try:
                    data = archive.read(MANIFEST_PATH)
                except KeyError:
                    return None
            return self.parse_string(
                data.decode("utf-8", errors="replace"), location=str(location)
            )

        return None

    def bundle_from_headers(
        self,
        headers: Mapping[str, str],
        file: Optional[Path] = None,
    ) -> Optional[Bundle]:
        """Build a :class:`Bundle` from manifest headers.

        Returns ``None`` for plain jars without ``Bundle-SymbolicName``.
        """
        name = symbolic_name(headers)
        if name is None:
            return None

        return Bundle(
            name=name,
            version=headers.get(MANIFEST_HEADERS["version"], "0.0.0").strip() or "0.0.0",
            file=file,
            group=self.group,
            requires=bundle_references(headers),
            imports=package_references(headers),
            exports=exported_packages(headers),
            fragment_host=fragment_host(headers),
        )

    def read_bundle(self, location: Path) -> Optional[Bundle]:
        """Read the bundle stored at ``location`` (jar or directory)."""
        headers = self.read(location)
        if headers is None:
            logger.debug("No manifest found in %s", location)
            return None
        return self.bundle_from_headers(headers, Path(location))

    def read_project(
        self,
        base_dir: Path,
        *,
        name: Optional[str] = None,
        packagings: Iterable[BundlePackaging] = (),
    ) -> Project:
        """Build a :class:`Project` from its directory and manifest.

        The project name defaults to the manifest's symbolic name, then to
        the directory name. Packaging manifest overrides take precedence
        over the project's own manifest.
        """
        base_dir = Path(base_dir)
        packagings = list(packagings)

        headers: Dict[str, str] = dict(self.read(base_dir) or {})
        for packaging in packagings:
            headers.update(packaging.manifest)

        return Project(
            name=name or symbolic_name(headers) or base_dir.name,
            base_dir=base_dir,
            version=headers.get(MANIFEST_HEADERS["version"], "0.0.0"),
            requires=bundle_references(headers),
            imports=package_references(headers),
            exports=exported_packages(headers),
            packagings=packagings,
        )

    def execution_environments(
        self,
        project: Project,
        available: Mapping[str, str],
    ) -> List[Optional[str]]:
        """Execution environments required by ``project``.

        Reads ``Bundle-RequiredExecutionEnvironment`` from the project's
        manifest merged with its bundle packaging's headers, and maps every
        name through ``available`` (unknown names map to ``None``).

        Raises:
            UnsupportedConfigurationError: The project defines more than
                one bundle packaging.
        """
        packaging = project.bundle_packaging()

        headers: Dict[str, str] = dict(self.read(project.base_dir) or {})
        if packaging is not None:
            headers.update(packaging.manifest)

        return [available.get(ee) for ee in execution_environment_names(headers)]
