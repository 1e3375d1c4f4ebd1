"""SQLite store for the status board and the jobs that sit on it."""

from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).parent.parent / ".env")

import sqlite3
from datetime import datetime, timezone
from typing import Optional

import config


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Get database connection."""
    conn = sqlite3.connect(db_path or config.get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


def init_database(db_path: Optional[Path] = None) -> None:
    """Create tables if they don't exist; seed the default statuses into an empty board."""
    conn = get_connection(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS statuses (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                color TEXT NOT NULL,
                sort_order INTEGER NOT NULL,
                is_default INTEGER DEFAULT 0,
                is_system INTEGER DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS jobs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                company TEXT NOT NULL,
                position TEXT NOT NULL,
                status TEXT NOT NULL,
                date_applied TEXT,
                notes TEXT,
                url TEXT,
                last_updated TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS status_migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                operation TEXT NOT NULL,
                job_id INTEGER,
                old_status TEXT,
                new_status TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_jobs_status
                ON jobs(status);
        """)
        conn.commit()

        count = conn.execute("SELECT COUNT(*) FROM statuses").fetchone()[0]
        if count == 0:
            _write_statuses(conn, config.DEFAULT_STATUSES)
            conn.commit()
    finally:
        conn.close()


def _row_to_status(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "color": row["color"],
        "order": row["sort_order"],
        "is_default": bool(row["is_default"]),
        "is_system": bool(row["is_system"]),
    }


def _write_statuses(conn: sqlite3.Connection, statuses: list[dict]) -> None:
    conn.execute("DELETE FROM statuses")
    conn.executemany("""
        INSERT INTO statuses (id, name, color, sort_order, is_default, is_system)
        VALUES (?, ?, ?, ?, ?, ?)
    """, [
        (s["id"], s["name"], s["color"], s["order"],
         1 if s.get("is_default") else 0, 1 if s.get("is_system") else 0)
        for s in statuses
    ])


def _write_jobs(conn: sqlite3.Connection, jobs: list[dict]) -> None:
    conn.execute("DELETE FROM jobs")
    conn.executemany("""
        INSERT INTO jobs (id, company, position, status, date_applied, notes, url, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """, [
        (j.get("id"), j.get("company", ""), j.get("position", ""), j["status"],
         j.get("date_applied"), j.get("notes"), j.get("url"), j.get("last_updated") or _now())
        for j in jobs
    ])


def _write_migrations(conn: sqlite3.Connection, operation: str, migrations: list[dict]) -> None:
    now = _now()
    conn.executemany("""
        INSERT INTO status_migrations (timestamp, operation, job_id, old_status, new_status)
        VALUES (?, ?, ?, ?, ?)
    """, [
        (now, operation, m.get("job_id"), m.get("old_status"), m["new_status"])
        for m in migrations
    ])


class SqliteStore:
    """
    Whole-collection load/save over one SQLite file.
    Each save is one transaction: it lands completely or not at all.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else config.get_database_path()

    def init(self) -> None:
        init_database(self.db_path)

    def load_statuses(self) -> list[dict]:
        """All statuses sorted by order."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT id, name, color, sort_order, is_default, is_system
                FROM statuses
                ORDER BY sort_order
            """)
            return [_row_to_status(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def save_statuses(self, statuses: list[dict]) -> None:
        self.save_board(statuses)

    def load_jobs(self) -> list[dict]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT id, company, position, status, date_applied, notes, url, last_updated
                FROM jobs
                ORDER BY id
            """)
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def save_jobs(self, jobs: list[dict]) -> None:
        conn = get_connection(self.db_path)
        try:
            _write_jobs(conn, jobs)
            conn.commit()
        finally:
            conn.close()

    def save_board(
        self,
        statuses: list[dict],
        jobs: Optional[list[dict]] = None,
        migrations: Optional[list[dict]] = None,
        operation: str = "",
    ) -> None:
        """Overwrite statuses (and jobs, if given) and log migrations in one transaction."""
        conn = get_connection(self.db_path)
        try:
            _write_statuses(conn, statuses)
            if jobs is not None:
                _write_jobs(conn, jobs)
            if migrations:
                _write_migrations(conn, operation, migrations)
            conn.commit()
        finally:
            conn.close()

    def add_job(
        self,
        company: str,
        position: str,
        status: str,
        date_applied: str = "",
        notes: str = "",
        url: str = "",
    ) -> int:
        """Insert a job, return its id. Status validity is the caller's concern."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                INSERT INTO jobs (company, position, status, date_applied, notes, url, last_updated)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (company, position, status, date_applied, notes, url, _now()))
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def get_migration_log(self, limit: int = config.MIGRATION_LOG_LIMIT) -> list[dict]:
        """Most recent job migrations first."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT timestamp, operation, job_id, old_status, new_status
                FROM status_migrations
                ORDER BY id DESC
                LIMIT ?
            """, (limit,))
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()
