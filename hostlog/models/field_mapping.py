"""
Per-host field mapping and field frequency models.
"""

from pydantic import BaseModel, Field, ConfigDict


DEFAULT_HOSTNAME_FIELD = "hostname"
DEFAULT_CONTENT_FIELD = "content"
DEFAULT_PRIORITY_FIELD = "priority"
DEFAULT_TIMESTAMP_FIELD = "timestamp"


class FieldMapping(BaseModel):
    """
    Names of the incoming fields that feed the four canonical log attributes.
    
    Lets sources that emit differently-named fields converge on one schema.
    At most one mapping exists per host identity.
    """
    
    host_identity: str = Field(
        description="Host the mapping applies to"
    )
    hostname_field: str = Field(
        default=DEFAULT_HOSTNAME_FIELD,
        description="Field holding the hostname label"
    )
    content_field: str = Field(
        default=DEFAULT_CONTENT_FIELD,
        description="Field holding the message body"
    )
    priority_field: str = Field(
        default=DEFAULT_PRIORITY_FIELD,
        description="Field holding the syslog priority"
    )
    timestamp_field: str = Field(
        default=DEFAULT_TIMESTAMP_FIELD,
        description="Field holding the event timestamp"
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "host_identity": "192.168.1.100",
                "hostname_field": "host",
                "content_field": "message",
                "priority_field": "severity",
                "timestamp_field": "time",
            }
        }
    )
    
    @classmethod
    def default(cls, host_identity: str) -> "FieldMapping":
        """Mapping that reads the standard field names."""
        return cls(host_identity=host_identity)


class FieldFrequency(BaseModel):
    """How often a raw field name has been observed for a host."""
    
    host_identity: str
    field_name: str
    count: int = Field(default=0, ge=0)
