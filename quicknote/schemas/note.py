"""
QuickNote - Pydantic Request/Response Schemas
===============================================

What:  Pydantic models for the JSON shapes the service reads and writes.
How:   NoteRequest validates JSON write bodies (field names match the
       browser client: "noteId", "content"). Response models are serialized
       by the routes with exclude_none so optional fields only appear when set.
Who:   Used by the request normalizer (input) and the routes (output).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteRequest(BaseModel):
    """
    JSON body of a write request: {"noteId": "...", "content": "..."}.

    Both fields are optional; missing or null becomes "". Unknown fields are
    ignored. A body that is not a JSON object, or whose fields are not
    strings, fails validation.
    """

    note_id: str = Field(default="", alias="noteId")
    content: str = Field(default="")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("note_id", "content", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    Reply to JSON writes and JSON-format errors.

    Examples:
        {"success": true, "noteId": "AB3K9"}
        {"success": false, "error": "Invalid note ID format"}
    """

    success: bool
    note_id: Optional[str] = Field(default=None, serialization_alias="noteId")
    error: Optional[str] = None


class NoteContentResponse(BaseModel):
    """Reply to a read from a caller that asked for application/json."""

    success: bool = True
    note_id: str = Field(serialization_alias="noteId")
    content: str


class HealthResponse(BaseModel):
    """
    Health check response.

    A healthy process whose storage backend is unreachable cannot serve a
    single note, so the backend is probed as part of the check.
    """

    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Storage backend status, e.g. 'disk: ok'")
    uptime_seconds: float = Field(description="Seconds since service started")
