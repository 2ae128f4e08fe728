"""Branch and branch request API endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import Principal, get_settings, require_auth
from ..core.config import Settings
from ..database import get_db
from ..models import DocumentRef
from ..schemas.branch import (
    BranchCreate,
    BranchRequestCreate,
    BranchRequestResolve,
    BranchRequestResponse,
    BranchResponse,
)
from ..services import BranchRequestService, BranchService
from .documents import resolve_document_ref

router = APIRouter(prefix="/api", tags=["branches"])


def _branch_service(db: Session, settings: Settings) -> BranchService:
    return BranchService(db, default_branch_name=settings.default_branch_name)


@router.post("/documents/{doc_id}/branches", response_model=BranchResponse, status_code=201)
def create_branch(
    body: BranchCreate,
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Create an empty branch, optionally forked from a parent branch."""
    service = _branch_service(db, settings)
    return service.create_branch(ref, body.name, principal, parent_branch_id=body.parent_branch_id)


@router.get("/documents/{doc_id}/branches", response_model=List[BranchResponse])
def list_branches(
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """List active branches, newest first."""
    return _branch_service(db, settings).list_branches(ref, principal)


@router.get("/branches/{branch_id}", response_model=BranchResponse)
def get_branch(
    branch_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    return _branch_service(db, settings).get_branch(branch_id, principal)


@router.delete("/branches/{branch_id}", response_model=BranchResponse)
def deactivate_branch(
    branch_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_auth),
):
    """Soft-deactivate a branch. Its versions are kept."""
    return _branch_service(db, settings).deactivate_branch(branch_id, principal)


@router.post(
    "/documents/{doc_id}/branch-requests",
    response_model=BranchRequestResponse,
    status_code=201,
)
def create_branch_request(
    body: BranchRequestCreate,
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Propose a branch for human approval."""
    service = BranchRequestService(db)
    return service.create_branch_request(
        ref,
        body.proposed_name,
        principal,
        reason=body.reason,
        requested_by_id=body.requested_by_id,
    )


@router.get("/documents/{doc_id}/branch-requests", response_model=List[BranchRequestResponse])
def list_branch_requests(
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """List branch requests of any status, newest first."""
    return BranchRequestService(db).list_branch_requests(ref, principal)


@router.post("/branch-requests/{request_id}/resolve", response_model=BranchRequestResponse)
def resolve_branch_request(
    request_id: str,
    body: BranchRequestResolve,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Approve or reject a pending request. 409 if it was already resolved.

    Approval does not create the branch; call the create branch endpoint
    with the returned ``proposed_name``.
    """
    service = BranchRequestService(db)
    return service.resolve_branch_request(
        request_id, body.decision, principal, final_name=body.final_name
    )
