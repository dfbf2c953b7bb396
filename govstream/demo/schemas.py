"""Pydantic schemas for the demo API."""

from pydantic import BaseModel, Field


class LookupRequest(BaseModel):
    """Request body carrying the NPI to look up."""

    npi: str = Field(..., min_length=1, description="National Provider Identifier")


class LookupResponse(BaseModel):
    """Result of a patient lookup."""

    found: bool
    relaxed: bool = False


class StatusResponse(BaseModel):
    """Simple status acknowledgement."""

    status: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    governance_version: str
    queue_depth: int | None = None
