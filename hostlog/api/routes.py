"""
FastAPI API routes.

JSON surface over the ingestion, query, scoring and mapping operations.
"""

import re
from datetime import datetime
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator

from hostlog import __version__
from hostlog.config import Settings, get_settings
from hostlog.database.repositories import (
    FieldFrequencyRepository,
    FieldMappingRepository,
    LogRepository,
)
from hostlog.ingestion.pipeline import CLIENT_FIELD, IngestionPipeline
from hostlog.models.field_mapping import (
    DEFAULT_CONTENT_FIELD,
    DEFAULT_HOSTNAME_FIELD,
    DEFAULT_PRIORITY_FIELD,
    DEFAULT_TIMESTAMP_FIELD,
    FieldFrequency,
    FieldMapping,
)
from hostlog.models.host_score import HostScore
from hostlog.models.log_entry import LogEntry
from hostlog.scoring.engine import VisibilityScoringEngine, top_host_scores
from hostlog.api.dependencies import (
    get_frequency_repository,
    get_ingestion_pipeline,
    get_log_repository,
    get_mapping_repository,
    get_scoring_engine,
)


router = APIRouter(prefix="/api")

_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")

# Keeps page * page_size inside SQLite's 64-bit OFFSET
MAX_PAGE = 2 ** 31 - 1


# Request/Response Models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class IngestRequest(BaseModel):
    """
    One parsed syslog record relayed over HTTP.

    ISO-8601 strings in `fields` are delivered to the pipeline as datetimes.
    """
    client: str = Field(
        default="",
        description="Sender as address:port"
    )
    fields: Dict[str, Union[StrictInt, StrictStr]] = Field(
        default_factory=dict,
        description="Parsed message fields"
    )

    @field_validator("fields")
    @classmethod
    def parse_timestamps(cls, fields: dict) -> dict:
        parsed = {}
        for name, value in fields.items():
            if isinstance(value, str) and _ISO_TIMESTAMP.match(value):
                try:
                    value = datetime.fromisoformat(value.replace("Z", "+00:00"))
                except ValueError:
                    pass  # Not a timestamp after all, keep the string
            parsed[name] = value
        return parsed

    def to_field_bag(self) -> dict:
        return {**self.fields, CLIENT_FIELD: self.client}


class LogView(LogEntry):
    """Log entry with its display severity."""
    severity_label: str


class LogsPage(BaseModel):
    """One page of filtered logs."""
    logs: List[LogView]
    page: int
    last_page: int


class ScoresResponse(BaseModel):
    """All host scores plus the top ranked hosts."""
    scores: Dict[str, float]
    top: List[HostScore]


class MappingRequest(BaseModel):
    """Field names to read for a host. Omitted names use the defaults."""
    hostname_field: str = DEFAULT_HOSTNAME_FIELD
    content_field: str = DEFAULT_CONTENT_FIELD
    priority_field: str = DEFAULT_PRIORITY_FIELD
    timestamp_field: str = DEFAULT_TIMESTAMP_FIELD


def _to_view(entry: LogEntry) -> LogView:
    return LogView(**entry.model_dump(), severity_label=entry.display_severity)


# Routes
@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.post("/ingest", response_model=LogView, status_code=201)
async def ingest_log(
    request: IngestRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """Normalize and store one record."""
    entry = await pipeline.ingest(request.to_field_bag())
    return _to_view(entry)


@router.get("/logs", response_model=LogsPage)
async def list_logs(
    h: List[str] = Query(default=[], description="Host identities to include"),
    p: int = Query(default=0, le=MAX_PAGE, description="Zero-based page"),
    logs: LogRepository = Depends(get_log_repository),
):
    """
    List logs newest first, optionally filtered by host.

    Args:
        h: Repeated host filter; none means all hosts
        p: Page index, negative values count as 0
    """
    page = max(p, 0)
    entries, last_page = await logs.query_filtered(h, page)

    return LogsPage(
        logs=[_to_view(e) for e in entries],
        page=page,
        last_page=last_page,
    )


@router.get("/logs/recent", response_model=List[LogView])
async def recent_logs(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    logs: LogRepository = Depends(get_log_repository),
    settings: Settings = Depends(get_settings),
):
    """Most recent logs across all hosts."""
    entries = await logs.query_recent(limit or settings.recent_limit)
    return [_to_view(e) for e in entries]


@router.get("/hosts", response_model=List[str])
async def list_hosts(logs: LogRepository = Depends(get_log_repository)):
    """All hosts that have sent logs."""
    hosts = await logs.distinct_host_identities()
    return sorted(h for h in hosts if h)


@router.get("/hosts/{host_identity}/fields", response_model=List[FieldFrequency])
async def list_host_fields(
    host_identity: str,
    frequencies: FieldFrequencyRepository = Depends(get_frequency_repository),
):
    """Raw field names seen from a host, most frequent first."""
    return await frequencies.list_frequencies(host_identity)


@router.get("/scores", response_model=ScoresResponse)
async def host_scores(
    engine: VisibilityScoringEngine = Depends(get_scoring_engine),
    settings: Settings = Depends(get_settings),
):
    """Visibility scores for all hosts."""
    scores = await engine.score_all()
    return ScoresResponse(scores=scores, top=top_host_scores(scores, settings.top_hosts))


@router.get("/scores/top", response_model=List[HostScore])
async def top_scores(
    n: Optional[int] = Query(default=None, ge=1),
    engine: VisibilityScoringEngine = Depends(get_scoring_engine),
    settings: Settings = Depends(get_settings),
):
    """Highest scoring hosts."""
    scores = await engine.score_all()
    return top_host_scores(scores, n or settings.top_hosts)


@router.get("/mappings", response_model=List[FieldMapping])
async def list_mappings(mappings: FieldMappingRepository = Depends(get_mapping_repository)):
    """All registered field mappings."""
    return await mappings.list_all()


@router.get("/mappings/{host_identity}", response_model=FieldMapping)
async def get_mapping(
    host_identity: str,
    mappings: FieldMappingRepository = Depends(get_mapping_repository),
):
    """Get the field mapping for a host."""
    mapping = await mappings.resolve(host_identity)

    if not mapping:
        raise HTTPException(status_code=404, detail="Mapping not found")

    return mapping


@router.put("/mappings/{host_identity}", response_model=FieldMapping)
async def put_mapping(
    host_identity: str,
    request: MappingRequest,
    mappings: FieldMappingRepository = Depends(get_mapping_repository),
):
    """Create or replace the field mapping for a host."""
    mapping = FieldMapping(host_identity=host_identity, **request.model_dump())
    return await mappings.upsert(mapping)


@router.post("/mappings/{host_identity}/default", response_model=FieldMapping)
async def create_default_mapping(
    host_identity: str,
    mappings: FieldMappingRepository = Depends(get_mapping_repository),
):
    """Register the standard field names for a host unless it has a mapping."""
    return await mappings.create_default(host_identity)


@router.delete("/mappings/{host_identity}")
async def delete_mapping(
    host_identity: str,
    mappings: FieldMappingRepository = Depends(get_mapping_repository),
):
    """Delete the field mapping for a host."""
    deleted = await mappings.delete(host_identity)

    if not deleted:
        raise HTTPException(status_code=404, detail="Mapping not found")

    return {"message": "Mapping deleted", "host_identity": host_identity}
