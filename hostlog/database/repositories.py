"""
Data access layer for log entries, field mappings and field frequencies.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from hostlog.database.db import Database
from hostlog.exceptions import EntryNotFoundError
from hostlog.models.field_mapping import FieldFrequency, FieldMapping
from hostlog.models.log_entry import LogEntry
from hostlog.timeutil import from_storage, to_storage, utcnow


logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 100

_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"


class LogRepository:
    """
    Append-only store of normalized log entries.

    Entries are written once and never updated or deleted here;
    retention belongs to whoever manages the database file.
    """

    def __init__(self, database: Database, page_size: int = DEFAULT_PAGE_SIZE):
        self.database = database
        self.page_size = page_size

    async def append(self, entry: LogEntry) -> LogEntry:
        """Persist one entry and return it with its id and created_at."""
        created_at = utcnow()
        async with self.database.session() as db:
            cursor = await db.execute(
                """
                INSERT INTO logs (
                    host_identity, hostname, content, priority,
                    timestamp, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.host_identity,
                    entry.hostname,
                    entry.content,
                    entry.priority,
                    to_storage(entry.timestamp),
                    to_storage(created_at),
                )
            )
            await db.commit()
            entry_id = cursor.lastrowid

        logger.debug(f"Stored log {entry_id} from {entry.host_identity}")
        return entry.model_copy(update={"id": entry_id, "created_at": created_at})

    async def query_filtered(
        self,
        host_identities: Iterable[str],
        page: int = 0,
    ) -> Tuple[List[LogEntry], int]:
        """
        Retrieve one page of entries, newest first.

        Args:
            host_identities: Hosts to include; empty means all hosts
            page: Zero-based page index, negative values count as 0

        Returns:
            (entries, last_page) where last_page is the zero-based index of
            the final page, 0 when nothing matches
        """
        hosts = sorted(set(host_identities))
        page = max(page, 0)

        where = ""
        params: list = []
        if hosts:
            where = f"WHERE host_identity IN ({', '.join('?' * len(hosts))})"
            params.extend(hosts)

        async with self.database.session() as db:
            cursor = await db.execute(
                f"SELECT * FROM logs {where} {_NEWEST_FIRST} LIMIT ? OFFSET ?",
                (*params, self.page_size, page * self.page_size)
            )
            rows = await cursor.fetchall()

            cursor = await db.execute(
                f"SELECT COUNT(*) AS total FROM logs {where}",
                params
            )
            total = (await cursor.fetchone())["total"]

        last_page = max(-(-total // self.page_size) - 1, 0)
        return [_row_to_entry(row) for row in rows], last_page

    async def query_recent(self, limit: int = DEFAULT_PAGE_SIZE) -> List[LogEntry]:
        """Retrieve the most recent entries across all hosts."""
        async with self.database.session() as db:
            cursor = await db.execute(
                f"SELECT * FROM logs {_NEWEST_FIRST} LIMIT ?",
                (max(limit, 0),)
            )
            rows = await cursor.fetchall()

        return [_row_to_entry(row) for row in rows]

    async def distinct_host_identities(self) -> List[str]:
        """All host identities that have sent logs, in no particular order."""
        async with self.database.session() as db:
            cursor = await db.execute("SELECT DISTINCT host_identity FROM logs")
            rows = await cursor.fetchall()

        return [row["host_identity"] for row in rows]

    async def most_recent_entry(self, host_identity: str) -> LogEntry:
        """
        Latest entry for a host by creation time.

        Raises:
            EntryNotFoundError: If the host has no entries
        """
        async with self.database.session() as db:
            cursor = await db.execute(
                f"SELECT * FROM logs WHERE host_identity = ? {_NEWEST_FIRST} LIMIT 1",
                (host_identity,)
            )
            row = await cursor.fetchone()

        if not row:
            raise EntryNotFoundError(host_identity)

        return _row_to_entry(row)

    async def count_since(self, host_identity: str, since: datetime) -> int:
        """Count a host's entries with timestamp strictly after `since`."""
        async with self.database.session() as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) AS total FROM logs
                WHERE host_identity = ? AND timestamp > ?
                """,
                (host_identity, to_storage(since))
            )
            row = await cursor.fetchone()

        return row["total"]

    async def entries_since(self, host_identity: str, since: datetime) -> List[LogEntry]:
        """A host's entries with timestamp strictly after `since`."""
        async with self.database.session() as db:
            cursor = await db.execute(
                f"""
                SELECT * FROM logs
                WHERE host_identity = ? AND timestamp > ?
                {_NEWEST_FIRST}
                """,
                (host_identity, to_storage(since))
            )
            rows = await cursor.fetchall()

        return [_row_to_entry(row) for row in rows]


class FieldMappingRepository:
    """Registry of per-host field mappings."""

    def __init__(self, database: Database):
        self.database = database

    async def resolve(self, host_identity: str) -> Optional[FieldMapping]:
        """Retrieve the mapping for a host, or None if none is registered."""
        async with self.database.session() as db:
            cursor = await db.execute(
                "SELECT * FROM log_maps WHERE host_identity = ?",
                (host_identity,)
            )
            row = await cursor.fetchone()

        if not row:
            return None

        return _row_to_mapping(row)

    async def upsert(self, mapping: FieldMapping) -> FieldMapping:
        """Create or fully replace the mapping for its host."""
        async with self.database.session() as db:
            await db.execute(
                """
                INSERT INTO log_maps (
                    host_identity, hostname_field, content_field,
                    priority_field, timestamp_field, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(host_identity) DO UPDATE SET
                    hostname_field = excluded.hostname_field,
                    content_field = excluded.content_field,
                    priority_field = excluded.priority_field,
                    timestamp_field = excluded.timestamp_field,
                    updated_at = excluded.updated_at
                """,
                (
                    mapping.host_identity,
                    mapping.hostname_field,
                    mapping.content_field,
                    mapping.priority_field,
                    mapping.timestamp_field,
                    to_storage(utcnow()),
                )
            )
            await db.commit()

        logger.info(f"Saved field mapping for {mapping.host_identity}")
        return mapping

    async def create_default(self, host_identity: str) -> FieldMapping:
        """
        Register the standard field names for a host.

        An existing mapping is left untouched and returned instead.
        """
        mapping = FieldMapping.default(host_identity)
        async with self.database.session() as db:
            await db.execute(
                """
                INSERT INTO log_maps (
                    host_identity, hostname_field, content_field,
                    priority_field, timestamp_field, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(host_identity) DO NOTHING
                """,
                (
                    mapping.host_identity,
                    mapping.hostname_field,
                    mapping.content_field,
                    mapping.priority_field,
                    mapping.timestamp_field,
                    to_storage(utcnow()),
                )
            )
            await db.commit()

        return await self.resolve(host_identity)

    async def delete(self, host_identity: str) -> bool:
        """Delete a host's mapping. Returns False if there was none."""
        async with self.database.session() as db:
            cursor = await db.execute(
                "DELETE FROM log_maps WHERE host_identity = ?",
                (host_identity,)
            )
            await db.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted field mapping for {host_identity}")
        return deleted

    async def list_all(self) -> List[FieldMapping]:
        async with self.database.session() as db:
            cursor = await db.execute("SELECT * FROM log_maps ORDER BY host_identity")
            rows = await cursor.fetchall()

        return [_row_to_mapping(row) for row in rows]


class FieldFrequencyRepository:
    """Per-host counters of raw field names seen in incoming records."""

    def __init__(self, database: Database):
        self.database = database

    async def observe(self, host_identity: str, field_names: Iterable[str]) -> None:
        """Increment the counter of every field name, creating it at 1."""
        rows = [(host_identity, name) for name in set(field_names)]
        if not rows:
            return

        async with self.database.session() as db:
            # Single-statement upsert: concurrent observers cannot lose increments
            await db.executemany(
                """
                INSERT INTO log_fields (host_identity, field_name, count)
                VALUES (?, ?, 1)
                ON CONFLICT(host_identity, field_name) DO UPDATE SET
                    count = count + 1
                """,
                rows
            )
            await db.commit()

    async def list_frequencies(self, host_identity: str) -> List[FieldFrequency]:
        """All counters for a host, most frequent first."""
        async with self.database.session() as db:
            cursor = await db.execute(
                """
                SELECT * FROM log_fields
                WHERE host_identity = ?
                ORDER BY count DESC, field_name ASC
                """,
                (host_identity,)
            )
            rows = await cursor.fetchall()

        return [FieldFrequency(**row) for row in rows]


def _row_to_entry(row: dict) -> LogEntry:
    """Convert database row to LogEntry model."""
    return LogEntry(
        id=row["id"],
        host_identity=row["host_identity"],
        hostname=row["hostname"],
        content=row["content"],
        priority=row["priority"],
        timestamp=from_storage(row["timestamp"]),
        created_at=from_storage(row["created_at"]),
    )


def _row_to_mapping(row: dict) -> FieldMapping:
    return FieldMapping(
        host_identity=row["host_identity"],
        hostname_field=row["hostname_field"],
        content_field=row["content_field"],
        priority_field=row["priority_field"],
        timestamp_field=row["timestamp_field"],
    )
