"""
FastAPI dependencies for dependency injection.

Every component receives the Database explicitly; these providers build
one shared set per process from settings. Tests swap them through
app.dependency_overrides.
"""

from functools import lru_cache

from hostlog.config import get_settings
from hostlog.database.db import Database
from hostlog.database.repositories import (
    FieldFrequencyRepository,
    FieldMappingRepository,
    LogRepository,
)
from hostlog.ingestion.pipeline import IngestionPipeline
from hostlog.scoring.engine import VisibilityScoringEngine


@lru_cache()
def get_database() -> Database:
    """Get cached database handle."""
    settings = get_settings()
    return Database(settings.db_path, timeout=settings.db_timeout_seconds)


@lru_cache()
def get_log_repository() -> LogRepository:
    return LogRepository(get_database(), page_size=get_settings().page_size)


@lru_cache()
def get_mapping_repository() -> FieldMappingRepository:
    return FieldMappingRepository(get_database())


@lru_cache()
def get_frequency_repository() -> FieldFrequencyRepository:
    return FieldFrequencyRepository(get_database())


@lru_cache()
def get_ingestion_pipeline() -> IngestionPipeline:
    """Get cached pipeline; it owns the set of pending background updates."""
    return IngestionPipeline(
        get_log_repository(),
        get_mapping_repository(),
        get_frequency_repository(),
    )


@lru_cache()
def get_scoring_engine() -> VisibilityScoringEngine:
    return VisibilityScoringEngine.from_settings(get_log_repository(), get_settings())
