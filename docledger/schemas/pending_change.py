"""Pending change schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..models import ActorType, ChangeType, PendingChangeStatus
from .common import UtcDatetime


class PendingChangeCreate(BaseModel):
    """Schema for staging an edit. ``changes`` is stored as given."""
    changes: Any = Field(...)
    description: str = Field(..., min_length=1)
    change_type: ChangeType = ChangeType.AI_SUGGESTION
    author_type: Optional[ActorType] = None
    author_id: Optional[str] = None


class PendingChangeAccept(BaseModel):
    """Content to write when accepting a change."""
    new_content: str


class PushRequest(BaseModel):
    """Direct user commit that bypasses staging."""
    content: str
    commit_message: Optional[str] = None


class PendingChangeResponse(BaseModel):
    """Schema for pending change response."""
    id: str
    document_id: str
    document_created_at: UtcDatetime
    changes: Any
    description: str
    change_type: ChangeType
    author_type: ActorType
    author_id: str
    status: PendingChangeStatus
    created_at: UtcDatetime
    resolved_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}
