"""Dependency and framework detection.

Manifests are located under the project root, parsed one by one (a bad
manifest is skipped, never fatal), and the parsed dependencies are matched
against FRAMEWORKS to name the frameworks the project is built on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken, checkpoint
from ..config import TriageConfig
from ..exceptions import FileAccessError, ManifestParseError
from ..file_ops import walk_files
from ..models import Dependency, DependencyReport, Framework
from .manifests import MANIFEST_FILENAMES, ParsedManifest, read_manifest

logger = logging.getLogger(__name__)

# Directories never searched for manifests
MANIFEST_SKIP_DIRS = frozenset(
    {"node_modules", ".git", ".svn", "dist", "build", "target", "__pycache__", "vendor"}
)


@dataclass(frozen=True)
class FrameworkRule:
    """A framework signature.

    Attributes:
        name: Display name
        ecosystem: Manifest ecosystem the dependency names belong to
        required_files: At least one must exist in the project (by basename)
        dependency_names: At least one must be declared in a parsed manifest
        confidence: Fixed confidence reported on a match
    """

    name: str
    ecosystem: str
    required_files: tuple[str, ...]
    dependency_names: tuple[str, ...]
    confidence: float


# Ordered: output follows table order
FRAMEWORKS: tuple[FrameworkRule, ...] = (
    FrameworkRule("React", "npm", ("package.json",), ("react",), 0.9),
    FrameworkRule("Vue", "npm", ("package.json",), ("vue",), 0.9),
    FrameworkRule("Angular", "npm", ("package.json", "angular.json"), ("@angular/core",), 0.9),
    FrameworkRule("Next.js", "npm", ("package.json",), ("next",), 0.9),
    FrameworkRule("Express", "npm", ("package.json",), ("express",), 0.8),
    FrameworkRule("NestJS", "npm", ("package.json",), ("@nestjs/core",), 0.9),
    FrameworkRule("Django", "pypi", ("manage.py", "requirements.txt"), ("django",), 0.9),
    FrameworkRule("Flask", "pypi", ("requirements.txt",), ("flask",), 0.8),
    FrameworkRule("FastAPI", "pypi", ("requirements.txt",), ("fastapi",), 0.8),
    FrameworkRule("Spring Boot", "maven", ("pom.xml",), ("spring-boot",), 0.9),
    FrameworkRule("Spring", "maven", ("pom.xml",), ("spring-core",), 0.8),
    FrameworkRule("Rails", "rubygems", ("Gemfile",), ("rails",), 0.9),
    FrameworkRule("Laravel", "composer", ("composer.json",), ("laravel/framework",), 0.9),
    FrameworkRule("Symfony", "composer", ("composer.json",), ("symfony/symfony",), 0.9),
)


def _matches(dependency: Dependency, ecosystem: str, wanted: str) -> bool:
    """Case-insensitive name match; Maven artifacts also match by prefix.

    ``org.springframework.boot:spring-boot-starter-web`` matches
    ``spring-boot``.
    """
    name = dependency.name.lower()
    wanted = wanted.lower()
    if ecosystem == "maven":
        artifact = name.rsplit(":", 1)[-1]
        return artifact == wanted or artifact.startswith(f"{wanted}-")
    return name == wanted


def detect_frameworks(files: list[Path], manifests: list[ParsedManifest]) -> list[Framework]:
    """Match the framework table against project files and parsed manifests.

    A framework needs one of its required files among ``files`` and one of
    its dependency names in a manifest of its ecosystem. Its version is the
    declared version of the first matching dependency, or None when the
    dependency is unpinned.
    """
    basenames = {Path(f).name for f in files}
    frameworks: list[Framework] = []

    for rule in FRAMEWORKS:
        if not any(required in basenames for required in rule.required_files):
            continue
        match = _find_dependency(rule, manifests)
        if match is None:
            continue
        version = None if match.version == "*" else match.version
        frameworks.append(Framework(rule.name, version, rule.confidence))

    return frameworks


def _find_dependency(rule: FrameworkRule, manifests: list[ParsedManifest]) -> Optional[Dependency]:
    for wanted in rule.dependency_names:
        for manifest in manifests:
            if manifest.ecosystem != rule.ecosystem:
                continue
            for dependency in manifest.dependencies:
                if _matches(dependency, rule.ecosystem, wanted):
                    return dependency
    return None


class DependencyAnalyzer:
    """Collects declared dependencies and detected frameworks for a project."""

    def __init__(self, config: Optional[TriageConfig] = None) -> None:
        self.config = config or TriageConfig()

    def find_files(self, root_dir: Path, token: Optional[CancellationToken] = None) -> list[Path]:
        """Every file within the manifest search depth."""
        files: list[Path] = []
        for path in walk_files(
            root_dir,
            MANIFEST_SKIP_DIRS,
            follow_symlinks=self.config.follow_symlinks,
            max_depth=self.config.manifest_max_depth,
        ):
            checkpoint(token)
            files.append(path)
        return files

    def parse_manifests(
        self, manifest_paths: list[Path], token: Optional[CancellationToken] = None
    ) -> list[ParsedManifest]:
        """Parse each manifest; unparseable ones are logged and skipped."""
        parsed: list[ParsedManifest] = []
        for path in manifest_paths:
            try:
                parsed.append(read_manifest(path, token))
            except ManifestParseError as e:
                logger.debug(f"Skipping manifest {path}: {e.reason}")
        return parsed

    def analyze_dependencies(
        self, root_dir: Path, token: Optional[CancellationToken] = None
    ) -> DependencyReport:
        """Dependencies from every parseable manifest, plus detected frameworks.

        Raises:
            FileAccessError: If ``root_dir`` cannot be listed
            OperationCancelledError: If the token fires
        """
        root_dir = Path(root_dir)
        if not root_dir.is_dir():
            raise FileAccessError(root_dir, "Not a directory")

        files = self.find_files(root_dir, token)
        manifests = self.parse_manifests(
            [f for f in files if f.name in MANIFEST_FILENAMES], token
        )

        dependencies = tuple(dep for manifest in manifests for dep in manifest.dependencies)
        frameworks = tuple(detect_frameworks(files, manifests))

        logger.debug(
            f"Parsed {len(manifests)} manifests: {len(dependencies)} dependencies, "
            f"{len(frameworks)} frameworks"
        )
        return DependencyReport(dependencies=dependencies, frameworks=frameworks)
