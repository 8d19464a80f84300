"""
Normalized log entry model.
Every ingested syslog record is stored in this common schema.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from hostlog.models.severity import SeverityBucket, severity_bucket, severity_label


class LogEntry(BaseModel):
    """
    Normalized log entry - immutable once created.
    
    `id` and `created_at` are assigned by the log store on append; an
    entry built by the ingestion pipeline carries neither until stored.
    """
    
    id: Optional[int] = Field(
        default=None,
        description="Store-assigned identifier"
    )
    host_identity: str = Field(
        description="Bare network address of the sending host (no port)"
    )
    hostname: str = Field(
        default="",
        description="Hostname label reported inside the message"
    )
    content: str = Field(
        default="",
        description="Message body"
    )
    priority: int = Field(
        default=0,
        description="Syslog priority (facility * 8 + severity)"
    )
    timestamp: datetime = Field(
        description="When the event occurred, as reported by the sender"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="When the entry was stored"
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 42,
                "host_identity": "10.0.0.5",
                "hostname": "web-01",
                "content": "sshd[812]: Accepted publickey for deploy",
                "priority": 38,
                "timestamp": "2024-01-15T03:22:15Z",
                "created_at": "2024-01-15T03:22:15.120331Z",
            }
        }
    )
    
    @property
    def severity(self) -> SeverityBucket:
        return severity_bucket(self.priority)
    
    @property
    def display_severity(self) -> str:
        return severity_label(self.priority)[0]
