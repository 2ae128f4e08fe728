"""Pydantic schemas for API validation."""

from .document import DocumentCreate, DocumentResponse
from .branch import (
    BranchCreate,
    BranchResponse,
    BranchRequestCreate,
    BranchRequestResolve,
    BranchRequestResponse,
)
from .version import (
    MergeCreate,
    MergeResponse,
    MergeResultResponse,
    VersionCreate,
    VersionResponse,
)
from .pending_change import (
    PendingChangeAccept,
    PendingChangeCreate,
    PendingChangeResponse,
    PushRequest,
)

__all__ = [
    "DocumentCreate",
    "DocumentResponse",
    "BranchCreate",
    "BranchResponse",
    "BranchRequestCreate",
    "BranchRequestResolve",
    "BranchRequestResponse",
    "VersionCreate",
    "VersionResponse",
    "MergeCreate",
    "MergeResponse",
    "MergeResultResponse",
    "PendingChangeAccept",
    "PendingChangeCreate",
    "PendingChangeResponse",
    "PushRequest",
]
