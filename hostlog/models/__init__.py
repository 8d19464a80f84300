"""
Pydantic models for hostlog.
"""

from hostlog.models.log_entry import LogEntry
from hostlog.models.field_mapping import FieldMapping, FieldFrequency
from hostlog.models.host_score import HostScore
from hostlog.models.severity import SeverityBucket

__all__ = [
    "LogEntry",
    "FieldMapping",
    "FieldFrequency",
    "HostScore",
    "SeverityBucket",
]
