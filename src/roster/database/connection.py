"""SQLite storage handle for the student roster.

A ``Database`` is constructed once at start-up and handed to the data-access
layer. It owns a small connection pool, applies the schema and publishes a
``TableChange`` for every committed write.
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Iterator, Optional, Union

from roster.config import Settings
from roster.logutils import get_logger

from .changes import ChangeNotifier, TableChange

logger = get_logger(__name__)

MEMORY = ":memory:"
SCHEMA_VERSION = 1
SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class ConnectionPool:
    """Thread-safe pool of SQLite connections.

    At most ``pool_size`` connections are opened; callers beyond that wait up
    to ``timeout`` seconds for one to be returned. An in-memory database uses
    a single connection, since every new connection would see a new database.
    """

    def __init__(self, target: str, pool_size: int = 5, timeout: float = 30.0):
        self._target = target
        self._in_memory = target == MEMORY
        self._pool_size = 1 if self._in_memory else pool_size
        self._timeout = timeout
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=self._pool_size)
        self._created = 0
        self._lock = threading.Lock()

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._target,
            check_same_thread=False,  # connections move between worker threads
            timeout=self._timeout,
        )
        conn.row_factory = sqlite3.Row

        if not self._in_memory:
            # WAL: readers don't block the writer
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
        conn.execute("PRAGMA busy_timeout = 5000")
        return conn

    def acquire(self) -> sqlite3.Connection:
        """Take a connection, opening one if the pool has room.

        Raises:
            TimeoutError: If every connection stays in use for ``timeout`` seconds
        """
        try:
            return self._pool.get_nowait()
        except Empty:
            pass

        with self._lock:
            if self._created < self._pool_size:
                self._created += 1
                logger.debug(
                    "Opening pooled connection",
                    extra={"extra_data": {"open": self._created, "pool_size": self._pool_size}},
                )
                return self._create_connection()

        try:
            return self._pool.get(timeout=self._timeout)
        except Empty:
            logger.error(
                "Connection pool exhausted",
                extra={"extra_data": {"timeout": self._timeout, "pool_size": self._pool_size}},
            )
            raise TimeoutError(f"No database connection available after {self._timeout}s") from None

    def release(self, conn: sqlite3.Connection) -> None:
        try:
            self._pool.put_nowait(conn)
        except Full:
            conn.close()

    def close_all(self) -> None:
        while True:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                break
            conn.close()
        with self._lock:
            self._created = 0


def _resolve_target(path: Union[str, Path]) -> str:
    if str(path) == MEMORY:
        return MEMORY
    candidate = Path(path)
    if ".." in candidate.parts:
        raise ValueError(f"Invalid database path: {path}")
    return str(candidate.resolve())


class Database:
    """Explicitly constructed storage handle.

    Example:
        db = Database(Path("student_database.db"))
        db.init_schema()
        with db.connect() as conn:
            conn.execute("SELECT COUNT(*) FROM students")
    """

    def __init__(self, path: Union[str, Path], pool_size: int = 5, timeout: float = 30.0):
        self.target = _resolve_target(path)
        self.changes = ChangeNotifier()
        self._pool = ConnectionPool(self.target, pool_size, timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_path, settings.pool_size, settings.pool_timeout)

    @property
    def in_memory(self) -> bool:
        return self.target == MEMORY

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Pooled connection; commits on success, rolls back and re-raises on error."""
        conn = self._pool.acquire()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.release(conn)

    def notify(self, table: str, operation: str, row_id: Optional[int] = None) -> None:
        """Publish a committed write to change listeners."""
        self.changes.publish(TableChange(table, operation, row_id))

    def init_schema(self, force: bool = False) -> None:
        """Create the schema, or drop and recreate it with ``force``.

        Raises:
            RuntimeError: If the file carries a newer schema version than this code knows
        """
        with self.connect() as conn:
            version = conn.execute("PRAGMA user_version").fetchone()[0]
            if version > SCHEMA_VERSION:
                raise RuntimeError(
                    f"Database schema version {version} is newer than supported version {SCHEMA_VERSION}"
                )

            if force:
                logger.info("Dropping existing students table", extra={"extra_data": {"target": self.target}})
                conn.execute("DROP TABLE IF EXISTS students")

            conn.executescript(SCHEMA_PATH.read_text())
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

        logger.info(
            "Database initialized",
            extra={"extra_data": {"target": self.target, "schema_version": SCHEMA_VERSION}},
        )
        if force:
            self.notify("students", "delete")

    def verify(self) -> dict:
        """Report tables, indexes, row counts and schema version."""
        if not self.in_memory and not Path(self.target).exists():
            return {"exists": False, "path": self.target, "tables": [], "error": "Database file not found"}

        with self.connect() as conn:
            tables = [
                row["name"]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
                )
            ]
            indexes = [
                row["name"]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='index' AND name NOT LIKE 'sqlite_%' ORDER BY name"
                )
            ]
            counts = {}
            for table in tables:
                # names come from sqlite_master; bracket-quoted
                counts[table] = conn.execute(f"SELECT COUNT(*) FROM [{table}]").fetchone()[0]
            version = conn.execute("PRAGMA user_version").fetchone()[0]

        return {
            "exists": True,
            "path": self.target,
            "tables": tables,
            "indexes": indexes,
            "row_counts": counts,
            "schema_version": version,
        }

    def close(self) -> None:
        self._pool.close_all()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
