"""
Ingestion pipeline - turns one field bag into one stored log entry.
"""

import asyncio
import logging
from typing import Iterable, Set

from hostlog.database.repositories import (
    FieldFrequencyRepository,
    FieldMappingRepository,
    LogRepository,
)
from hostlog.exceptions import StorageError
from hostlog.ingestion.extractor import FieldBag, get_int, get_string, get_timestamp
from hostlog.ingestion.host_identity import resolve_host_identity
from hostlog.models.field_mapping import FieldMapping
from hostlog.models.log_entry import LogEntry


logger = logging.getLogger(__name__)


#: Field carrying the transport-level "address:port" of the sender
CLIENT_FIELD = "client"


class IngestionPipeline:
    """
    Normalizes and stores incoming syslog records.

    For each record the pipeline:
    1. Resolves the sender's host identity from the client field
    2. Looks up the host's field mapping, falling back to default names
    3. Extracts hostname, content, priority and timestamp
    4. Schedules a background field frequency update
    5. Appends the entry to the log store

    The frequency update is fire-and-forget: ingest() never waits for it,
    and a failed or lost update is only logged.
    """

    def __init__(
        self,
        logs: LogRepository,
        mappings: FieldMappingRepository,
        frequencies: FieldFrequencyRepository,
    ):
        self.logs = logs
        self.mappings = mappings
        self.frequencies = frequencies
        self._background: Set[asyncio.Task] = set()

    async def ingest(self, field_bag: FieldBag) -> LogEntry:
        """
        Store one record.

        Args:
            field_bag: Parsed syslog fields keyed by name

        Returns:
            The stored entry

        Raises:
            StorageError: If the entry could not be written; the record is dropped
        """
        host_identity = resolve_host_identity(get_string(field_bag, CLIENT_FIELD))
        mapping = await self._resolve_mapping(host_identity)

        entry = LogEntry(
            host_identity=host_identity,
            hostname=get_string(field_bag, mapping.hostname_field),
            content=get_string(field_bag, mapping.content_field),
            priority=get_int(field_bag, mapping.priority_field),
            timestamp=get_timestamp(field_bag, mapping.timestamp_field),
        )

        self._track_fields(host_identity, list(field_bag))

        try:
            return await self.logs.append(entry)
        except StorageError as e:
            logger.error(f"Dropping log from {host_identity or '<unknown>'}: {e}")
            raise

    async def drain(self) -> None:
        """Wait for pending frequency updates. Used on shutdown and in tests."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    @property
    def pending_updates(self) -> int:
        return len(self._background)

    async def _resolve_mapping(self, host_identity: str) -> FieldMapping:
        try:
            mapping = await self.mappings.resolve(host_identity)
        except StorageError as e:
            logger.warning(f"Field mapping lookup failed for {host_identity}, using defaults: {e}")
            mapping = None

        return mapping or FieldMapping.default(host_identity)

    def _track_fields(self, host_identity: str, field_names: Iterable[str]) -> None:
        task = asyncio.create_task(self._observe_fields(host_identity, field_names))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _observe_fields(self, host_identity: str, field_names: Iterable[str]) -> None:
        try:
            await self.frequencies.observe(host_identity, field_names)
        except Exception as e:
            # Advisory data only; never surfaces to the ingest caller
            logger.error(f"Field frequency update failed for {host_identity}: {e}", exc_info=True)
