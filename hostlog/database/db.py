"""
SQLite database handle and schema initialization.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Union

import aiosqlite

from hostlog.exceptions import StorageError


logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        host_identity TEXT NOT NULL,
        hostname TEXT NOT NULL DEFAULT '',
        content TEXT NOT NULL DEFAULT '',
        priority INTEGER NOT NULL DEFAULT 0,
        timestamp TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_logs_created_at ON logs(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_logs_host_created ON logs(host_identity, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_logs_host_timestamp ON logs(host_identity, timestamp)",
    """
    CREATE TABLE IF NOT EXISTS log_maps (
        host_identity TEXT PRIMARY KEY,
        hostname_field TEXT NOT NULL,
        content_field TEXT NOT NULL,
        priority_field TEXT NOT NULL,
        timestamp_field TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS log_fields (
        host_identity TEXT NOT NULL,
        field_name TEXT NOT NULL,
        count INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (host_identity, field_name)
    )
    """,
)


class Database:
    """
    Explicit handle on one SQLite database file.
    
    Each operation opens its own short-lived connection, so concurrent
    callers never share a cursor; SQLite serializes the writes.
    """
    
    def __init__(self, path: Union[str, Path], timeout: float = 30.0):
        self.path = Path(path).expanduser().resolve()
        self.timeout = timeout
    
    async def init(self) -> None:
        """Create the database file, tables and indexes."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        
        async with self.session() as db:
            # WAL lets readers proceed while an append is in flight
            await db.execute("PRAGMA journal_mode=WAL")
            for statement in SCHEMA:
                await db.execute(statement)
            await db.commit()
        
        logger.info(f"Initialized log database at {self.path}")
    
    def connect(self) -> aiosqlite.Connection:
        return aiosqlite.connect(self.path, timeout=self.timeout)
    
    @asynccontextmanager
    async def session(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection with dict rows; driver errors become StorageError."""
        try:
            async with self.connect() as db:
                db.row_factory = _dict_factory
                yield db
        except aiosqlite.Error as e:
            raise StorageError(f"Database error on {self.path.name}: {e}") from e


def _dict_factory(cursor, row):
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}
