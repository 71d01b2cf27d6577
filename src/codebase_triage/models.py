"""Data models for the analysis pipeline.

Every record handed between stages is a frozen dataclass. Collections are
tuples so a finished report cannot be mutated after the generator builds it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DependencyKind(str, Enum):
    RUNTIME = "runtime"
    DEV = "dev"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SmellType(str, Enum):
    LONG_FUNCTION = "long_function"
    TOO_COMPLEX = "too_complex"
    DUPLICATION = "duplication"
    DEEP_NESTING = "deep_nesting"


class ReportStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


class ProjectStatus(str, Enum):
    """Project lifecycle: pending -> analyzing -> completed | failed."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProjectStatus.COMPLETED, ProjectStatus.FAILED)

    def can_transition_to(self, target: ProjectStatus) -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.PENDING: frozenset({ProjectStatus.ANALYZING, ProjectStatus.FAILED}),
    ProjectStatus.ANALYZING: frozenset({ProjectStatus.COMPLETED, ProjectStatus.FAILED}),
    ProjectStatus.COMPLETED: frozenset(),
    ProjectStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class SourceFile:
    """A file path plus its content, read on demand."""

    path: str
    content: str

    @property
    def lines(self) -> list[str]:
        return split_lines(self.content)


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` without producing a phantom line after a trailing newline."""
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


# ── Language distribution ──────────────────────────────────────────


@dataclass(frozen=True)
class LanguageStat:
    name: str
    line_count: int
    percentage: float


@dataclass(frozen=True)
class LanguageDistribution:
    """Languages sorted by line count, descending."""

    languages: tuple[LanguageStat, ...] = ()

    def __len__(self) -> int:
        return len(self.languages)

    def names(self) -> list[str]:
        return [lang.name for lang in self.languages]


# ── Dependencies ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Dependency:
    name: str
    version: str
    kind: DependencyKind


@dataclass(frozen=True)
class Framework:
    name: str
    version: Optional[str]
    confidence: float


@dataclass(frozen=True)
class DependencyReport:
    dependencies: tuple[Dependency, ...] = ()
    frameworks: tuple[Framework, ...] = ()


# ── Metrics ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FunctionMetric:
    """One function-like node: name, first line, span and complexity."""

    name: str
    line: int
    line_count: int
    complexity: int


@dataclass(frozen=True)
class LOCCount:
    total: int = 0
    code: int = 0
    comments: int = 0
    blank: int = 0


@dataclass(frozen=True)
class ComplexityMetrics:
    functions: tuple[FunctionMetric, ...] = ()

    @property
    def total_complexity(self) -> int:
        return sum(fn.complexity for fn in self.functions)

    @property
    def average_complexity(self) -> float:
        if not self.functions:
            return 0.0
        return self.total_complexity / len(self.functions)


@dataclass(frozen=True)
class CodeMetrics:
    total_files: int = 0
    total_lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    blank_lines: int = 0
    average_complexity: float = 0.0
    maintainability_index: float = 0.0


# ── Smells ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CodeSmell:
    type: SmellType
    severity: Severity
    file: str
    line: int
    description: str
    metadata: dict[str, Any] = field(default_factory=dict)


# ── Report ─────────────────────────────────────────────────────────


@dataclass
class AnalysisData:
    """Mutable accumulator filled in stage by stage during a run.

    Fields left as None are defaulted by the report generator.
    """

    languages: Optional[LanguageDistribution] = None
    frameworks: Optional[tuple[Framework, ...]] = None
    dependencies: Optional[tuple[Dependency, ...]] = None
    metrics: Optional[CodeMetrics] = None
    issues: Optional[tuple[CodeSmell, ...]] = None


@dataclass(frozen=True)
class AnalysisReport:
    project_id: str
    status: ReportStatus
    start_time: datetime
    end_time: datetime
    languages: LanguageDistribution = field(default_factory=LanguageDistribution)
    frameworks: tuple[Framework, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    metrics: CodeMetrics = field(default_factory=CodeMetrics)
    issues: tuple[CodeSmell, ...] = ()
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives (lists, never None, for collections)."""
        data = asdict(self)
        data["status"] = self.status.value
        data["start_time"] = self.start_time.isoformat()
        data["end_time"] = self.end_time.isoformat()
        data["languages"] = [asdict(lang) for lang in self.languages.languages]
        data["frameworks"] = [asdict(fw) for fw in self.frameworks]
        data["dependencies"] = [
            {"name": dep.name, "version": dep.version, "kind": dep.kind.value}
            for dep in self.dependencies
        ]
        data["issues"] = [
            {
                "type": smell.type.value,
                "severity": smell.severity.value,
                "file": smell.file,
                "line": smell.line,
                "description": smell.description,
                "metadata": smell.metadata,
            }
            for smell in self.issues
        ]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisReport:
        """Rebuild a report from ``to_dict`` output."""
        return cls(
            project_id=data["project_id"],
            status=ReportStatus(data["status"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]),
            languages=LanguageDistribution(
                tuple(LanguageStat(**lang) for lang in data.get("languages") or [])
            ),
            frameworks=tuple(Framework(**fw) for fw in data.get("frameworks") or []),
            dependencies=tuple(
                Dependency(dep["name"], dep["version"], DependencyKind(dep["kind"]))
                for dep in data.get("dependencies") or []
            ),
            metrics=CodeMetrics(**(data.get("metrics") or {})),
            issues=tuple(
                CodeSmell(
                    type=SmellType(smell["type"]),
                    severity=Severity(smell["severity"]),
                    file=smell["file"],
                    line=smell["line"],
                    description=smell["description"],
                    metadata=smell.get("metadata") or {},
                )
                for smell in data.get("issues") or []
            ),
            error=data.get("error"),
        )
