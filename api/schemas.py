"""
Pydantic schemas for IndexDrift API.
"""
from typing import Optional, Any
from pydantic import BaseModel, Field


# ============================================================
# COMPARISON SCHEMAS
# ============================================================

class ComparisonRequest(BaseModel):
    """Request to compare a local document with a remote snapshot."""
    local: Any
    remote: Optional[Any] = Field(default=None, description="Omit or null when the remote resource does not exist")


class ChangeSchema(BaseModel):
    path: str
    change_type: str
    value: Optional[str] = None
    from_value: Optional[str] = Field(default=None, alias="from")
    to_value: Optional[str] = Field(default=None, alias="to")

    class Config:
        populate_by_name = True


class ComparisonResponse(BaseModel):
    exists: bool
    has_differences: bool
    change_count: int
    message: str
    local_hash: str
    remote_hash: str
    fingerprint: str
    changes: list[ChangeSchema]
    lines: list[str]


# ============================================================
# DRIFT SCHEMAS
# ============================================================

class DriftRequest(BaseModel):
    """Request to check a definition against the configured snapshot source."""
    definition: dict
    index_name: Optional[str] = None


class DriftResponse(ComparisonResponse):
    index_name: str
