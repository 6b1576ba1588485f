"""SQLite-backed snapshot store.

Schema:
    commits            (id, timestamp, message, author)
    file_fingerprints  (commit_id, path, size, mtime, digest)
                       PRIMARY KEY (commit_id, path)

Metadata fingerprints fill size and mtime; content fingerprints fill digest.
Every write runs inside one BEGIN IMMEDIATE transaction, so a commit is
either fully visible with all of its files or not at all, and id allocation
is serialized across processes.
"""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .core import Commit, FileFingerprint, Snapshot
from .errors import StoreUnavailable, WriteFailure

logger = logging.getLogger(__name__)

# Seconds sqlite waits on a locked database before giving up
BUSY_TIMEOUT = 30.0

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS commits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp INTEGER NOT NULL,
        message TEXT NOT NULL,
        author TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS file_fingerprints (
        commit_id INTEGER NOT NULL REFERENCES commits(id),
        path TEXT NOT NULL,
        size INTEGER,
        mtime INTEGER,
        digest TEXT,
        PRIMARY KEY (commit_id, path)
    )
    """,
)

_TABLES = {"commits", "file_fingerprints"}


class SnapshotStore:
    """Persists commits and their file fingerprints."""

    def __init__(self, conn: sqlite3.Connection, db_path: Path, read_only: bool = False):
        self._conn = conn
        self.db_path = db_path
        self.read_only = read_only

    # ----- opening -----

    @classmethod
    def create(cls, db_path: Path) -> "SnapshotStore":
        """Create the store (or open it if it exists) and ensure the schema."""
        db_path = Path(db_path)
        try:
            conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT, isolation_level=None)
            for statement in _SCHEMA:
                conn.execute(statement)
        except sqlite3.Error as e:
            raise StoreUnavailable(db_path, str(e)) from e
        conn.execute("PRAGMA foreign_keys = ON")
        logger.debug("Created snapshot store at %s", db_path)
        return cls(conn, db_path)

    @classmethod
    def open(cls, db_path: Path, read_only: bool = False) -> "SnapshotStore":
        """Open an existing store.

        Args:
            db_path: Path to the SQLite database
            read_only: Open without write access (status, log, dashboard)

        Raises:
            StoreUnavailable: If the database is missing, unreadable, or
                does not carry the expected schema
        """
        db_path = Path(db_path)
        if not db_path.is_file():
            raise StoreUnavailable(db_path, "database file not found")

        mode = "ro" if read_only else "rw"
        uri = f"{db_path.resolve().as_uri()}?mode={mode}"
        try:
            conn = sqlite3.connect(uri, uri=True, timeout=BUSY_TIMEOUT, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailable(db_path, str(e)) from e

        try:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        except sqlite3.Error as e:
            conn.close()
            raise StoreUnavailable(db_path, str(e)) from e

        missing = _TABLES - {row[0] for row in rows}
        if missing:
            conn.close()
            raise StoreUnavailable(db_path, f"missing tables: {', '.join(sorted(missing))}")

        conn.execute("PRAGMA foreign_keys = ON")
        return cls(conn, db_path, read_only=read_only)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SnapshotStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----- writes -----

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block in one immediate transaction; roll back on any error."""
        conn = self._conn
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise WriteFailure(f"Cannot start transaction on {self.db_path}: {e}") from e
        try:
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback()
            raise WriteFailure(f"Write to {self.db_path} failed and was rolled back: {e}") from e
        except Exception:
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # The transaction is already gone when sqlite aborted it itself
            logger.debug("Rollback on %s: %s", self.db_path, e)

    @staticmethod
    def _insert_commit(conn: sqlite3.Connection, timestamp: int, message: str, author: str) -> int:
        cursor = conn.execute(
            "INSERT INTO commits (timestamp, message, author) VALUES (?, ?, ?)",
            (int(timestamp), message, author),
        )
        return cursor.lastrowid

    @staticmethod
    def _insert_fingerprints(
        conn: sqlite3.Connection, commit_id: int, fingerprints: Iterable[FileFingerprint]
    ) -> int:
        rows = [(commit_id, fp.path, fp.size, fp.mtime, fp.digest) for fp in fingerprints]
        conn.executemany(
            "INSERT INTO file_fingerprints (commit_id, path, size, mtime, digest) "
            "VALUES (?, ?, ?, ?, ?)",
            rows,
        )
        return len(rows)

    def create_commit(self, timestamp: int, message: str, author: str) -> int:
        """Allocate a new commit id and record its header."""
        with self._transaction() as conn:
            return self._insert_commit(conn, timestamp, message, author)

    def write_fingerprints(self, commit_id: int, fingerprints: Iterable[FileFingerprint]) -> int:
        """Persist all fingerprints of a commit as one atomic unit.

        Returns:
            Number of fingerprints written

        Raises:
            WriteFailure: If any row fails (duplicate path, unknown commit);
                no row of the batch is kept
        """
        with self._transaction() as conn:
            return self._insert_fingerprints(conn, commit_id, fingerprints)

    def record_snapshot(
        self,
        timestamp: int,
        message: str,
        author: str,
        fingerprints: Iterable[FileFingerprint],
    ) -> Commit:
        """Create a commit together with its fingerprints in one transaction."""
        with self._transaction() as conn:
            commit_id = self._insert_commit(conn, timestamp, message, author)
            count = self._insert_fingerprints(conn, commit_id, fingerprints)
        logger.debug("Recorded commit %d with %d files", commit_id, count)
        return Commit(id=commit_id, timestamp=int(timestamp), message=message, author=author)

    # ----- reads -----

    def latest_commit_id(self) -> Optional[int]:
        row = self._conn.execute("SELECT MAX(id) FROM commits").fetchone()
        return row[0] if row and row[0] is not None else None

    def latest_commit(self) -> Optional[Commit]:
        row = self._conn.execute(
            "SELECT id, timestamp, message, author FROM commits ORDER BY id DESC LIMIT 1"
        ).fetchone()
        return _commit_from_row(row) if row else None

    def fingerprints_for(self, commit_id: int) -> Snapshot:
        cursor = self._conn.execute(
            "SELECT path, size, mtime, digest FROM file_fingerprints "
            "WHERE commit_id = ? ORDER BY path",
            (commit_id,),
        )
        return {
            path: FileFingerprint(path=path, size=size, mtime=mtime, digest=digest)
            for path, size, mtime, digest in cursor
        }

    def latest_snapshot(self) -> Snapshot:
        """Fingerprints of the latest commit, or an empty snapshot."""
        commit_id = self.latest_commit_id()
        if commit_id is None:
            return {}
        return self.fingerprints_for(commit_id)

    def all_commits(self) -> List[Commit]:
        cursor = self._conn.execute(
            "SELECT id, timestamp, message, author FROM commits ORDER BY id ASC"
        )
        return [_commit_from_row(row) for row in cursor]

    def commit_count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM commits").fetchone()[0]


def _commit_from_row(row) -> Commit:
    commit_id, timestamp, message, author = row
    return Commit(id=commit_id, timestamp=timestamp, message=message, author=author)
