from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Dict, Any, Optional, List


class StringRequest(BaseModel):
    """Request schema for creating/analyzing a string."""
    value: str = Field(..., description="The string to analyze")


class StringProperties(BaseModel):
    """Computed properties of an analyzed string."""
    length: int
    is_palindrome: bool
    unique_characters: int
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]


class StringResponse(BaseModel):
    """Response schema for string records."""
    id: str
    value: str
    properties: StringProperties
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; they were written as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class FilterResponse(BaseModel):
    """Response schema for filtered results."""
    data: List[StringResponse]
    count: int
    page: Optional[int] = None
    limit: Optional[int] = None
    interpreted_query: Optional[Dict[str, Any]] = None
    filters_applied: Optional[Dict[str, Any]] = None
