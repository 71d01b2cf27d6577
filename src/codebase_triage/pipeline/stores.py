"""Persistence contracts the pipeline depends on.

The orchestrator only needs to move a project through its status lifecycle
and to store the finished report. Any object with these methods will do;
``persistence.TriageDB`` is the SQLite implementation and ``MemoryStore`` an
in-process one.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from ..exceptions import InvalidStatusTransitionError
from ..models import AnalysisReport, ProjectStatus

ANALYZER_AGENT = "analyzer"


@runtime_checkable
class ProjectStore(Protocol):
    def update_status(self, project_id: str, status: ProjectStatus) -> None: ...


@runtime_checkable
class AnalysisStore(Protocol):
    def save(self, project_id: str, agent_type: str, report: AnalysisReport) -> None: ...


class MemoryStore:
    """In-process store implementing both contracts.

    Keeps the full status history per project so callers can inspect the
    transitions a run went through.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.statuses: dict[str, list[ProjectStatus]] = {}
        self.reports: dict[str, list[tuple[str, AnalysisReport]]] = {}

    def create_project(self, project_id: str) -> None:
        with self._lock:
            self.statuses.setdefault(project_id, [ProjectStatus.PENDING])

    def status(self, project_id: str) -> ProjectStatus:
        return self.statuses.get(project_id, [ProjectStatus.PENDING])[-1]

    def update_status(self, project_id: str, status: ProjectStatus) -> None:
        with self._lock:
            history = self.statuses.setdefault(project_id, [ProjectStatus.PENDING])
            current = history[-1]
            if not current.can_transition_to(status):
                raise InvalidStatusTransitionError(project_id, current.value, status.value)
            history.append(status)

    def save(self, project_id: str, agent_type: str, report: AnalysisReport) -> None:
        with self._lock:
            self.reports.setdefault(project_id, []).append((agent_type, report))

    def latest_report(self, project_id: str) -> AnalysisReport | None:
        saved = self.reports.get(project_id)
        return saved[-1][1] if saved else None
