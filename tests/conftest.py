"""
Shared fixtures: every test gets its own database file.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from hostlog.database.db import Database
from hostlog.database.repositories import (
    FieldFrequencyRepository,
    FieldMappingRepository,
    LogRepository,
)
from hostlog.models.log_entry import LogEntry
from hostlog.timeutil import utcnow


# Syslog priorities (facility 1 = user) for each severity bucket
ERROR_PRIORITY = 8 + 2      # critical
WARNING_PRIORITY = 8 + 4    # warning
INFO_PRIORITY = 8 + 6       # informational


@pytest_asyncio.fixture
async def database(tmp_path):
    """Initialized database under tmp_path."""
    db = Database(tmp_path / "logs.db")
    await db.init()
    return db


@pytest.fixture
def log_repo(database):
    return LogRepository(database)


@pytest.fixture
def mapping_repo(database):
    return FieldMappingRepository(database)


@pytest.fixture
def frequency_repo(database):
    return FieldFrequencyRepository(database)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for scoring."""
    return utcnow()


def make_entry(
    host: str,
    timestamp: datetime,
    priority: int = INFO_PRIORITY,
    content: str = "test message",
) -> LogEntry:
    """Helper to create an unsaved log entry."""
    return LogEntry(
        host_identity=host,
        hostname=f"host-{host}",
        content=content,
        priority=priority,
        timestamp=timestamp,
    )


async def add_entries(repo: LogRepository, host: str, timestamps, priority: int = INFO_PRIORITY):
    """Append one entry per timestamp, in order."""
    for ts in timestamps:
        await repo.append(make_entry(host, ts, priority))


def minutes_ago(now: datetime, *minutes: float):
    return [now - timedelta(minutes=m) for m in minutes]
