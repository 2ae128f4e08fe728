"""Data access repositories."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .branch_repository import BranchRepository
from .version_repository import VersionRepository
from .merge_repository import MergeRepository
from .branch_request_repository import BranchRequestRepository
from .pending_change_repository import PendingChangeRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "BranchRepository",
    "VersionRepository",
    "MergeRepository",
    "BranchRequestRepository",
    "PendingChangeRepository",
]
