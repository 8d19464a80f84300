"""
Ingestion: field extraction, host identity resolution and the pipeline.
"""

from hostlog.ingestion.extractor import extract, get_string, get_int, get_timestamp
from hostlog.ingestion.host_identity import resolve_host_identity
from hostlog.ingestion.pipeline import IngestionPipeline

__all__ = [
    "extract",
    "get_string",
    "get_int",
    "get_timestamp",
    "resolve_host_identity",
    "IngestionPipeline",
]
