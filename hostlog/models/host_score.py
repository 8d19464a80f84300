"""
Host visibility score model.
"""

from pydantic import BaseModel, Field


class HostScore(BaseModel):
    """Derived visibility score for one host. Never persisted."""
    
    host_identity: str = Field(
        description="Scored host"
    )
    score: float = Field(
        ge=0,
        description="Composite of time decay, volume and severity"
    )
