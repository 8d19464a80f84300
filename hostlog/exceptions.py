"""
Exception hierarchy for the ingestion, storage and scoring core.
"""


class HostlogError(Exception):
    """Base class for all hostlog errors."""


class StorageError(HostlogError):
    """The underlying database failed to read or write."""


class EntryNotFoundError(HostlogError):
    """A host has no stored log entries."""

    def __init__(self, host_identity: str):
        super().__init__(f"No log entries for host {host_identity!r}")
        self.host_identity = host_identity
