"""Version and merge schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from ..models import ActorType, MergeStrategy
from .common import UtcDatetime


class VersionCreate(BaseModel):
    """Schema for committing a version to a branch."""
    content: str
    commit_message: Optional[str] = None


class VersionResponse(BaseModel):
    """Schema for version response."""
    id: str
    branch_id: str
    content: str
    commit_message: Optional[str] = None
    author_type: ActorType
    author_id: str
    parent_version_id: Optional[str] = None
    sequence: int
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class MergeCreate(BaseModel):
    """Schema for merging one branch into another.

    ``content`` is required for ``manual`` merges and rejected for ``auto``.
    """
    source_branch_id: str
    target_branch_id: str
    strategy: MergeStrategy = MergeStrategy.AUTO
    content: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "source_branch_id": "a1b2...",
                    "target_branch_id": "c3d4...",
                    "strategy": "manual",
                    "content": "# Reconciled text",
                }
            ]
        }
    }


class MergeResponse(BaseModel):
    """Schema for a merge audit row."""
    id: str
    source_branch_id: str
    target_branch_id: str
    merged_version_id: str
    merged_by_type: ActorType
    merged_by_id: str
    merge_strategy: MergeStrategy
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class MergeResultResponse(BaseModel):
    """Merge row plus the version it appended to the target."""
    merge: MergeResponse
    version: VersionResponse

    model_config = {"from_attributes": True}
