"""Pending change API endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import Principal, get_settings, require_auth
from ..core.config import Settings
from ..database import get_db
from ..models import DocumentRef
from ..schemas.pending_change import (
    PendingChangeAccept,
    PendingChangeCreate,
    PendingChangeResponse,
    PushRequest,
)
from ..schemas.version import VersionResponse
from ..services import PendingChangeService
from .documents import resolve_document_ref

router = APIRouter(prefix="/api", tags=["pending-changes"])


def _service(db: Session, settings: Settings) -> PendingChangeService:
    return PendingChangeService(db, default_branch_name=settings.default_branch_name)


@router.post(
    "/documents/{doc_id}/pending-changes",
    response_model=PendingChangeResponse,
    status_code=201,
)
def create_pending_change(
    body: PendingChangeCreate,
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Stage an edit. Live content is untouched until the change is accepted."""
    return _service(db, settings).create_pending_change(
        ref,
        body.changes,
        body.description,
        body.change_type,
        principal,
        author_type=body.author_type,
        author_id=body.author_id,
    )


@router.get("/documents/{doc_id}/pending-changes", response_model=List[PendingChangeResponse])
def list_pending_changes(
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Changes still pending, oldest first."""
    return _service(db, settings).list_pending_changes(ref, principal)


@router.get("/pending-changes/{change_id}", response_model=PendingChangeResponse)
def get_pending_change(
    change_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Get a change in any status."""
    return _service(db, settings).get_pending_change(change_id, principal)


@router.post("/pending-changes/{change_id}/accept", response_model=VersionResponse)
def accept_pending_change(
    change_id: str,
    body: PendingChangeAccept,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Apply a change. Returns the audit version written to the default branch."""
    return _service(db, settings).accept_pending_change(change_id, body.new_content, principal)


@router.post("/pending-changes/{change_id}/reject", response_model=PendingChangeResponse)
def reject_pending_change(
    change_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    return _service(db, settings).reject_pending_change(change_id, principal)


@router.post("/documents/{doc_id}/push", response_model=VersionResponse, status_code=201)
def push_local_changes(
    body: PushRequest,
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Commit the caller's local edit directly, bypassing staging."""
    return _service(db, settings).push_local_changes(
        ref, body.content, principal, commit_message=body.commit_message
    )
