"""Branch and branch request schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from ..models import ActorType, BranchRequestStatus
from .common import UtcDatetime


class BranchCreate(BaseModel):
    """Schema for creating a branch."""
    name: str = Field(..., max_length=255)
    parent_branch_id: Optional[str] = None


class BranchResponse(BaseModel):
    """Schema for branch response."""
    id: str
    document_id: str
    document_created_at: UtcDatetime
    name: str
    parent_branch_id: Optional[str] = None
    created_by_type: ActorType
    created_by_id: str
    is_active: bool
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class BranchRequestCreate(BaseModel):
    """Schema for proposing a branch."""
    proposed_name: str = Field(..., max_length=255)
    reason: Optional[str] = None
    requested_by_id: Optional[str] = None  # assistant id; defaults to the caller


class BranchRequestResolve(BaseModel):
    """Approve or reject a branch request, optionally renaming on approval."""
    decision: BranchRequestStatus
    final_name: Optional[str] = Field(None, max_length=255)


class BranchRequestResponse(BaseModel):
    """Schema for branch request response."""
    id: str
    document_id: str
    document_created_at: UtcDatetime
    proposed_name: str
    reason: Optional[str] = None
    requested_by_type: ActorType
    requested_by_id: str
    status: BranchRequestStatus
    responded_at: Optional[UtcDatetime] = None
    created_at: UtcDatetime

    model_config = {"from_attributes": True}
