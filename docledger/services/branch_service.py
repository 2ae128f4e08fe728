"""Branch service: named lines of history per document.

Branches start empty; the first version arrives through a commit, a merge,
or an accepted pending change. They are never deleted, only deactivated.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import ValidationError
from ..models import ActorType, Branch, DocumentRef
from ..repositories import BranchRepository
from .document_service import DocumentService

logger = logging.getLogger(__name__)

MAX_BRANCH_NAME_LENGTH = 255


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Branch name is required", field="name")
    if len(name) > MAX_BRANCH_NAME_LENGTH:
        raise ValidationError(
            f"Branch name exceeds {MAX_BRANCH_NAME_LENGTH} characters", field="name"
        )
    return name


class BranchService:
    """Create, list, read and deactivate branches."""

    def __init__(self, db: Session, default_branch_name: str = "main"):
        self.db = db
        self.default_branch_name = default_branch_name
        self.branch_repo = BranchRepository(db)
        self.doc_service = DocumentService(db)

    def create_branch(
        self,
        ref: DocumentRef,
        name: str,
        principal: Principal,
        parent_branch_id: Optional[str] = None,
    ) -> Branch:
        """Create an empty branch, optionally forked from *parent_branch_id*."""
        with transaction(self.db):
            self.doc_service.get_document_authorized(ref, principal)
            branch = self._create_branch_impl(
                ref, name, parent_branch_id, principal.actor_type, principal.user_id
            )

        logger.info(
            "Branch created",
            extra={
                "branch_id": branch.id,
                "doc_id": ref.document_id,
                "branch_name": branch.name,
                "parent_branch_id": parent_branch_id,
            },
        )
        return branch

    def _create_branch_impl(
        self,
        ref: DocumentRef,
        name: str,
        parent_branch_id: Optional[str],
        created_by_type: ActorType,
        created_by_id: str,
    ) -> Branch:
        """Insert without committing; used inside callers' transactions."""
        name = _clean_name(name)
        if parent_branch_id is not None:
            parent = self.branch_repo.get_by_id(parent_branch_id)
            if not parent.document_ref.same_as(ref):
                raise ValidationError(
                    "Parent branch belongs to a different document", field="parent_branch_id"
                )
        return self.branch_repo.create(ref, name, parent_branch_id, created_by_type, created_by_id)

    def list_branches(self, ref: DocumentRef, principal: Principal) -> List[Branch]:
        """Active branches of a document, newest first."""
        self.doc_service.get_document_authorized(ref, principal)
        return self.branch_repo.list_active(ref)

    def get_branch(self, branch_id: str, principal: Principal) -> Branch:
        """Get a branch (active or not) after checking access to its document."""
        branch = self.branch_repo.get_by_id(branch_id)
        self.doc_service.get_document_authorized(branch.document_ref, principal)
        return branch

    def deactivate_branch(self, branch_id: str, principal: Principal) -> Branch:
        """Soft-deactivate a branch. Idempotent; versions are kept."""
        with transaction(self.db):
            branch = self.branch_repo.get_for_update(branch_id)
            self.doc_service.get_document_authorized(branch.document_ref, principal)
            changed = self.branch_repo.deactivate(branch_id)

        if changed:
            logger.info("Branch deactivated", extra={"branch_id": branch_id})
        self.db.refresh(branch)
        return branch

    def ensure_default_branch(
        self,
        ref: DocumentRef,
        created_by_type: ActorType,
        created_by_id: str,
    ) -> Branch:
        """Oldest active default-named branch of a document, created if missing.

        Does not commit: runs inside the caller's transaction.
        """
        branch = self.branch_repo.find_active_by_name(ref, self.default_branch_name)
        if branch is not None:
            return branch
        branch = self._create_branch_impl(
            ref, self.default_branch_name, None, created_by_type, created_by_id
        )
        logger.info(
            "Default branch created",
            extra={"branch_id": branch.id, "doc_id": ref.document_id, "branch_name": branch.name},
        )
        return branch
