"""Document schemas."""

from pydantic import BaseModel, Field, field_validator

from ..models import Visibility
from .common import UtcDatetime


class DocumentCreate(BaseModel):
    """Schema for creating a document."""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    visibility: Visibility = Visibility.PRIVATE

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Onboarding Guide",
                    "content": "# Onboarding\n\nWelcome...",
                    "visibility": "team",
                }
            ]
        }
    }


class DocumentResponse(BaseModel):
    """Schema for document response.

    ``id`` and ``created_at`` together identify the document; pass
    ``created_at`` back as a query parameter to address this lineage.
    """
    id: str
    created_at: UtcDatetime
    title: str
    content: str
    visibility: Visibility
    owner_id: str
    has_unpushed_changes: bool
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}
