"""API routes."""

from .documents import router as documents_router
from .branches import router as branches_router
from .versions import router as versions_router
from .pending_changes import router as pending_changes_router

__all__ = [
    "documents_router",
    "branches_router",
    "versions_router",
    "pending_changes_router",
]
