"""Database models."""

from .document import Document, DocumentRef
from .branch import Branch, BranchRequest
from .version import Version, Merge
from .pending_change import PendingChange
from .enums import (
    ActorType,
    BranchRequestStatus,
    ChangeType,
    MergeStrategy,
    PendingChangeStatus,
    Visibility,
)

__all__ = [
    "Document", "DocumentRef",
    "Branch", "BranchRequest",
    "Version", "Merge",
    "PendingChange",
    "ActorType", "BranchRequestStatus", "ChangeType",
    "MergeStrategy", "PendingChangeStatus", "Visibility",
]
