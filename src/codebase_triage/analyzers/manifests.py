"""Dependency manifest parsers.

Each parser takes the manifest text and returns the declared dependencies in
file order. A parser raises ManifestParseError when the text is malformed;
the dependency analyzer treats that as a per-manifest skip.

Supported formats:
    package.json       npm            dependencies / devDependencies
    requirements.txt   pip            one requirement per line
    Pipfile            pipenv         [packages] / [dev-packages]
    pom.xml            Maven          top-level <dependencies>
    build.gradle       Gradle         implementation 'group:artifact:version'
    composer.json      Composer       require / require-dev
    Gemfile            Bundler        gem 'name', 'version'
"""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..cancellation import CancellationToken, checkpoint
from ..exceptions import ManifestParseError
from ..models import Dependency, DependencyKind

RUNTIME = DependencyKind.RUNTIME
DEV = DependencyKind.DEV

_VERSION_PREFIX = re.compile(r"^[\^~>=<]+")


def clean_version(version: Any) -> str:
    """Strip leading range operators; empty or missing becomes ``"*"``."""
    if version is None:
        return "*"
    cleaned = _VERSION_PREFIX.sub("", str(version).strip()).strip()
    return cleaned or "*"


# ── npm / Composer ─────────────────────────────────────────────────


def _load_json_object(content: str, source: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(Path(source), f"invalid JSON: {e}")
    if not isinstance(data, dict):
        raise ManifestParseError(Path(source), "top level is not an object")
    return data


def _json_section(
    data: dict[str, Any], key: str, kind: DependencyKind, source: str
) -> list[Dependency]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ManifestParseError(Path(source), f"'{key}' is not an object")
    return [Dependency(name, clean_version(version), kind) for name, version in section.items()]


def parse_package_json(content: str, source: str = "package.json") -> list[Dependency]:
    data = _load_json_object(content, source)
    return _json_section(data, "dependencies", RUNTIME, source) + _json_section(
        data, "devDependencies", DEV, source
    )


def _is_platform_package(name: str) -> bool:
    return name == "php" or name.startswith("ext-")


def parse_composer_json(content: str, source: str = "composer.json") -> list[Dependency]:
    data = _load_json_object(content, source)
    deps = _json_section(data, "require", RUNTIME, source) + _json_section(
        data, "require-dev", DEV, source
    )
    return [dep for dep in deps if not _is_platform_package(dep.name)]


# ── Python ─────────────────────────────────────────────────────────

# name, optional [extras], optional first specifier
_REQUIREMENT = re.compile(
    r"^([A-Za-z0-9][A-Za-z0-9._\-]*)\s*(?:\[[^\]]*\])?\s*(?:[=<>!~]+\s*([^;,\s]+))?"
)
_INLINE_COMMENT = re.compile(r"\s+#.*$")


def parse_requirements_txt(content: str, source: str = "requirements.txt") -> list[Dependency]:
    """Parse pip requirement lines.

    Option lines (``-r``, ``-e``, ``--index-url``), URLs and local paths are
    skipped; extras and environment markers are ignored.
    """
    deps: list[Dependency] = []
    for raw_line in content.splitlines():
        line = _INLINE_COMMENT.sub("", raw_line).strip()
        if not line or line.startswith("#") or line.startswith("-"):
            continue
        if "://" in line or line.startswith("."):
            continue
        match = _REQUIREMENT.match(line)
        if match:
            deps.append(Dependency(match.group(1), clean_version(match.group(2)), RUNTIME))
    return deps


def _pipfile_version(spec: Any) -> str:
    if isinstance(spec, dict):
        return clean_version(spec.get("version"))
    return clean_version(spec)


def parse_pipfile(content: str, source: str = "Pipfile") -> list[Dependency]:
    """Parse [packages] and [dev-packages]; other sections are ignored."""
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(Path(source), f"invalid TOML: {e}")

    deps: list[Dependency] = []
    for section, kind in (("packages", RUNTIME), ("dev-packages", DEV)):
        table = data.get(section) or {}
        if not isinstance(table, dict):
            raise ManifestParseError(Path(source), f"[{section}] is not a table")
        for name, spec in table.items():
            deps.append(Dependency(name, _pipfile_version(spec), kind))
    return deps


# ── JVM ────────────────────────────────────────────────────────────

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")


def _local(tag: str) -> str:
    """Element tag without its XML namespace."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def parse_pom_xml(content: str, source: str = "pom.xml") -> list[Dependency]:
    """Parse the project's own ``<dependencies>`` block.

    ``dependencyManagement`` and plugin dependencies are not declared
    dependencies of the project and are left out. ``${property}`` versions
    are resolved from ``<properties>`` when defined there.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ManifestParseError(Path(source), f"invalid XML: {e}")

    properties: dict[str, str] = {}
    props = _child(root, "properties")
    if props is not None:
        for prop in props:
            if prop.text:
                properties[_local(prop.tag)] = prop.text.strip()
    project_version = _child_text(root, "version")
    if project_version:
        properties.setdefault("project.version", project_version)

    def resolve(value: str) -> str:
        return _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)

    deps: list[Dependency] = []
    dependencies = _child(root, "dependencies")
    if dependencies is None:
        return deps

    for dep in dependencies:
        if _local(dep.tag) != "dependency":
            continue
        artifact_id = _child_text(dep, "artifactId")
        if not artifact_id:
            continue
        group_id = _child_text(dep, "groupId")
        version = _child_text(dep, "version")
        scope = _child_text(dep, "scope") or "compile"

        deps.append(
            Dependency(
                name=f"{group_id}:{artifact_id}" if group_id else artifact_id,
                version=clean_version(resolve(version) if version else None),
                kind=DEV if scope == "test" else RUNTIME,
            )
        )
    return deps


_GRADLE_DEPENDENCY = re.compile(
    r"\b(implementation|api|compile|testImplementation|testCompile)\s*\(?\s*['\"]([^'\"]+)['\"]"
)


def parse_build_gradle(content: str, source: str = "build.gradle") -> list[Dependency]:
    """Parse string-notation dependency declarations.

    ``group:artifact`` without a version gets version ``"*"``.
    """
    deps: list[Dependency] = []
    for match in _GRADLE_DEPENDENCY.finditer(content):
        configuration, notation = match.group(1), match.group(2)
        parts = [part.strip() for part in notation.split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            continue
        version = parts[2] if len(parts) >= 3 else None
        deps.append(
            Dependency(
                name=f"{parts[0]}:{parts[1]}",
                version=clean_version(version),
                kind=DEV if configuration.startswith("test") else RUNTIME,
            )
        )
    return deps


# ── Ruby ───────────────────────────────────────────────────────────

_GEM = re.compile(r"""^gem\s+['"]([^'"]+)['"](?:\s*,\s*['"]([^'"]+)['"])?""")
_GROUP_BLOCK = re.compile(r"^group\s+(.+?)\s+do\b")
_BLOCK_START = re.compile(r"\bdo(\s*\|[^|]*\|)?\s*$")
_DEV_GROUP = re.compile(r":(development|test)\b")
_INLINE_GROUP = re.compile(r"\bgroups?\s*(?::|=>)\s*(.+)$")


def parse_gemfile(content: str, source: str = "Gemfile") -> list[Dependency]:
    """Parse ``gem`` lines, tracking ``group :development/:test do`` blocks."""
    deps: list[Dependency] = []
    # One entry per open do-block: True when it is a development/test group
    blocks: list[bool] = []

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        group = _GROUP_BLOCK.match(line)
        if group:
            blocks.append(bool(_DEV_GROUP.search(group.group(1))))
            continue
        if line == "end":
            if blocks:
                blocks.pop()
            continue

        gem = _GEM.match(line)
        if gem:
            inline = _INLINE_GROUP.search(line)
            is_dev = any(blocks) or bool(inline and _DEV_GROUP.search(inline.group(1)))
            deps.append(Dependency(gem.group(1), clean_version(gem.group(2)), DEV if is_dev else RUNTIME))
            continue

        if _BLOCK_START.search(line):
            blocks.append(False)

    return deps


# ── Registry ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ManifestFormat:
    filename: str
    ecosystem: str
    parse: Callable[[str, str], list[Dependency]]


MANIFEST_FORMATS: tuple[ManifestFormat, ...] = (
    ManifestFormat("package.json", "npm", parse_package_json),
    ManifestFormat("requirements.txt", "pypi", parse_requirements_txt),
    ManifestFormat("Pipfile", "pypi", parse_pipfile),
    ManifestFormat("pom.xml", "maven", parse_pom_xml),
    ManifestFormat("build.gradle", "maven", parse_build_gradle),
    ManifestFormat("composer.json", "composer", parse_composer_json),
    ManifestFormat("Gemfile", "rubygems", parse_gemfile),
)

_BY_FILENAME = {fmt.filename: fmt for fmt in MANIFEST_FORMATS}
MANIFEST_FILENAMES = frozenset(_BY_FILENAME)


@dataclass(frozen=True)
class ParsedManifest:
    path: Path
    ecosystem: str
    dependencies: tuple[Dependency, ...]


def get_format(path: Path) -> Optional[ManifestFormat]:
    return _BY_FILENAME.get(Path(path).name)


def read_manifest(path: Path, token: Optional[CancellationToken] = None) -> ParsedManifest:
    """Read and parse one manifest file.

    Manifests are decoded as strict UTF-8: a file that is not valid text is
    reported as unparseable rather than guessed at.

    Raises:
        ManifestParseError: If the file is unreadable, not UTF-8 or malformed
    """
    checkpoint(token)
    fmt = get_format(path)
    if fmt is None:
        raise ManifestParseError(path, "not a recognized manifest")
    try:
        content = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ManifestParseError(path, f"not valid UTF-8: {e}")
    except OSError as e:
        raise ManifestParseError(path, f"cannot read: {e}")
    try:
        dependencies = tuple(fmt.parse(content, str(path)))
    except (ValueError, TypeError, AttributeError) as e:
        raise ManifestParseError(path, f"unexpected structure: {e}")
    return ParsedManifest(Path(path), fmt.ecosystem, dependencies)
