"""SQLite-backed project and analysis store.

Implements both pipeline store contracts: project status updates (with the
lifecycle enforced) and saving analysis reports as JSON.
"""

import json
import sqlite3
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import InvalidStatusTransitionError
from ..logging_config import get_logger
from ..models import AnalysisReport, ProjectStatus, utcnow

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

DB_DIRNAME = ".codebase-triage"
DB_FILENAME = "triage.db"


@dataclass(frozen=True)
class ProjectRecord:
    id: str
    name: str
    source_type: str
    source_url: Optional[str]
    status: ProjectStatus
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class AnalysisRecord:
    """Summary row for a stored analysis; the report itself is loaded on demand."""

    id: int
    project_id: str
    agent_type: str
    status: str
    created_at: str


class TriageDB:
    """Manages the triage SQLite database.

    Usage::

        with TriageDB(path) as db:
            project_id = db.create_project("legacy-app")
            orchestrator = AnalysisOrchestrator(db, db)
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @classmethod
    def for_project(cls, project_root: str | Path) -> "TriageDB":
        """Database kept in ``.codebase-triage/`` under ``project_root``."""
        return cls(Path(project_root) / DB_DIRNAME / DB_FILENAME)

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("TriageDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create the database directory with a .gitignore so it stays untracked."""
        db_dir = self.db_path.parent
        db_dir.mkdir(parents=True, exist_ok=True)
        if db_dir.name == DB_DIRNAME:
            gitignore = db_dir / ".gitignore"
            if not gitignore.exists():
                gitignore.write_text("*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self._ensure_dir()
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Triage DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "TriageDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )
        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── projects ─────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS projects (
                id          TEXT PRIMARY KEY,
                name        TEXT NOT NULL,
                source_type TEXT NOT NULL,
                source_url  TEXT,
                status      TEXT NOT NULL DEFAULT 'pending',
                created_at  TEXT NOT NULL,
                updated_at  TEXT NOT NULL
            )
            """
        )

        # ── analyses ─────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS analyses (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                project_id  TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
                agent_type  TEXT NOT NULL,
                result      TEXT NOT NULL,
                created_at  TEXT NOT NULL
            )
            """
        )

        c.execute("CREATE INDEX IF NOT EXISTS idx_analyses_project ON analyses(project_id)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_projects_created ON projects(created_at)")

        c.commit()

    # ── projects ──────────────────────────────────────────────────

    def create_project(
        self,
        name: str,
        source_type: str = "local",
        source_url: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> str:
        """Insert a ``pending`` project and return its id."""
        project_id = project_id or uuid.uuid4().hex
        now = utcnow().isoformat()
        self.conn.execute(
            """
            INSERT INTO projects (id, name, source_type, source_url, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (project_id, name, source_type, source_url, ProjectStatus.PENDING.value, now, now),
        )
        self.conn.commit()
        return project_id

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        row = self.conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        return _project_from_row(row) if row else None

    def list_projects(self) -> list[ProjectRecord]:
        rows = self.conn.execute("SELECT * FROM projects ORDER BY created_at DESC").fetchall()
        return [_project_from_row(row) for row in rows]

    def update_status(self, project_id: str, status: ProjectStatus) -> None:
        """Move a project to ``status``.

        Raises:
            InvalidStatusTransitionError: If the project is unknown or the
                lifecycle does not allow the move
        """
        project = self.get_project(project_id)
        if project is None:
            raise InvalidStatusTransitionError(project_id, "unknown", status.value)
        if not project.status.can_transition_to(status):
            raise InvalidStatusTransitionError(project_id, project.status.value, status.value)

        self.conn.execute(
            "UPDATE projects SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, utcnow().isoformat(), project_id),
        )
        self.conn.commit()

    # ── analyses ──────────────────────────────────────────────────

    def save(self, project_id: str, agent_type: str, report: AnalysisReport) -> None:
        """Store a report as JSON under ``project_id``."""
        self.conn.execute(
            "INSERT INTO analyses (project_id, agent_type, result, created_at) VALUES (?, ?, ?, ?)",
            (project_id, agent_type, json.dumps(report.to_dict()), utcnow().isoformat()),
        )
        self.conn.commit()

    def latest_analysis(
        self, project_id: str, agent_type: str = "analyzer"
    ) -> Optional[AnalysisReport]:
        row = self.conn.execute(
            """
            SELECT result FROM analyses
            WHERE project_id = ? AND agent_type = ?
            ORDER BY id DESC LIMIT 1
            """,
            (project_id, agent_type),
        ).fetchone()
        if row is None:
            return None
        return AnalysisReport.from_dict(json.loads(row["result"]))

    def list_analyses(self, project_id: Optional[str] = None) -> list[AnalysisRecord]:
        """Stored analyses, newest first, optionally for one project."""
        query = "SELECT id, project_id, agent_type, result, created_at FROM analyses"
        params: tuple = ()
        if project_id is not None:
            query += " WHERE project_id = ?"
            params = (project_id,)
        query += " ORDER BY id DESC"

        records = []
        for row in self.conn.execute(query, params).fetchall():
            records.append(
                AnalysisRecord(
                    id=row["id"],
                    project_id=row["project_id"],
                    agent_type=row["agent_type"],
                    status=json.loads(row["result"]).get("status", ""),
                    created_at=row["created_at"],
                )
            )
        return records


def _project_from_row(row: sqlite3.Row) -> ProjectRecord:
    return ProjectRecord(
        id=row["id"],
        name=row["name"],
        source_type=row["source_type"],
        source_url=row["source_url"],
        status=ProjectStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
