"""
Database module for hostlog.
"""

from hostlog.database.db import Database
from hostlog.database.repositories import (
    LogRepository,
    FieldMappingRepository,
    FieldFrequencyRepository,
)

__all__ = [
    "Database",
    "LogRepository",
    "FieldMappingRepository",
    "FieldFrequencyRepository",
]
