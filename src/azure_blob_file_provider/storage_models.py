"""Data models for objects listed from blob storage."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .utils import to_utc


class BlobItem(BaseModel):
    """Authoritative metadata for one blob, as returned by a listing."""
    name: str                         # Full blob name, "/"-separated
    size: int = Field(ge=0)           # Content length in bytes
    last_modified: datetime           # Timezone-aware UTC

    @field_validator("last_modified")
    @classmethod
    def normalize_last_modified(cls, v: datetime) -> datetime:
        """Store timestamps as UTC so comparisons are exact."""
        return to_utc(v)
