"""Version and merge API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..schemas.version import (
    MergeCreate,
    MergeResponse,
    MergeResultResponse,
    VersionCreate,
    VersionResponse,
)
from ..services import MergeService, VersionService

router = APIRouter(prefix="/api", tags=["versions"])


@router.post("/branches/{branch_id}/versions", response_model=VersionResponse, status_code=201)
def commit_version(
    branch_id: str,
    body: VersionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Append a snapshot to the branch. 409 if the branch head moved meanwhile."""
    service = VersionService(db)
    return service.commit_version(branch_id, body.content, principal, body.commit_message)


@router.get("/branches/{branch_id}/versions", response_model=List[VersionResponse])
def list_versions(
    branch_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """List versions of a branch, newest first."""
    return VersionService(db).list_versions(branch_id, principal, skip, limit)


@router.get("/branches/{branch_id}/versions/head", response_model=Optional[VersionResponse])
def get_head(
    branch_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Latest version of a branch; ``null`` while the branch is empty."""
    return VersionService(db).get_head(branch_id, principal)


@router.get("/versions/{version_id}", response_model=VersionResponse)
def get_version(
    version_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    return VersionService(db).get_version(version_id, principal)


@router.post("/merges", response_model=MergeResultResponse, status_code=201)
def merge_branches(
    body: MergeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Merge the source branch into the target branch.

    Appends one version to the target and records a merge row. The source
    branch is not modified.
    """
    service = MergeService(db)
    result = service.merge(
        body.source_branch_id,
        body.target_branch_id,
        body.strategy,
        principal,
        content=body.content,
    )
    return {"merge": result.merge, "version": result.version}


@router.get("/branches/{branch_id}/merges", response_model=List[MergeResponse])
def list_merges(
    branch_id: str,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Merges into or out of a branch, newest first."""
    return MergeService(db).list_merges(branch_id, principal, limit)
