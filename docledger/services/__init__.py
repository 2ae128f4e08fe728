"""Business logic services."""

from .document_service import DocumentService
from .branch_service import BranchService
from .version_service import VersionService
from .merge_service import MergeResult, MergeService
from .branch_request_service import BranchRequestService
from .pending_change_service import PendingChangeService

__all__ = [
    "DocumentService",
    "BranchService",
    "VersionService",
    "MergeResult",
    "MergeService",
    "BranchRequestService",
    "PendingChangeService",
]
