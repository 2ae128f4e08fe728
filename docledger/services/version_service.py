"""Version service: the append-only ledger of content snapshots per branch.

Every append computes its parent from the branch head while holding the
branch row lock, and the (branch_id, sequence) unique constraint rejects
any append that raced past it. There are no update or delete operations;
corrections are new commits.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import ConflictError, ValidationError
from ..models import ActorType, Branch, Version
from ..repositories import BranchRepository, VersionRepository
from .document_service import DocumentService

logger = logging.getLogger(__name__)


class VersionService:
    """Commit and read versions."""

    def __init__(self, db: Session):
        self.db = db
        self.branch_repo = BranchRepository(db)
        self.version_repo = VersionRepository(db)
        self.doc_service = DocumentService(db)

    def commit_version(
        self,
        branch_id: str,
        content: str,
        principal: Principal,
        commit_message: Optional[str] = None,
    ) -> Version:
        """Append a snapshot to a branch on behalf of *principal*."""
        if content is None:
            raise ValidationError("Content is required", field="content")

        with transaction(self.db):
            branch = self.branch_repo.get_for_update(branch_id)
            self.doc_service.get_document_authorized(branch.document_ref, principal)
            version = self.append_to_branch(
                branch, content, commit_message, principal.actor_type, principal.user_id
            )

        logger.info(
            "Version committed",
            extra={"branch_id": branch_id, "version_id": version.id, "sequence": version.sequence},
        )
        return version

    def append_to_branch(
        self,
        branch: Branch,
        content: str,
        commit_message: Optional[str],
        author_type: ActorType,
        author_id: str,
    ) -> Version:
        """Append inside the caller's transaction.

        *branch* must have been loaded with BranchRepository.get_for_update.
        Raises ConflictError if the branch is inactive or another commit
        claimed the same head.
        """
        # A failed flush expires *branch*; only the plain id is safe in the handler.
        branch_id = branch.id
        if not branch.is_active:
            raise ConflictError(branch_id, "Cannot commit to an inactive branch")
        try:
            return self.version_repo.append(
                branch_id, content, commit_message, author_type, author_id
            )
        except IntegrityError as e:
            logger.warning(
                "Concurrent commit lost the race for the branch head",
                extra={"branch_id": branch_id, "error": str(e.orig)},
            )
            raise ConflictError(branch_id, "Branch head moved during commit; retry") from e

    def list_versions(
        self,
        branch_id: str,
        principal: Principal,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Version]:
        """Versions of a branch, newest first. Paginate with skip/limit."""
        branch = self.branch_repo.get_by_id(branch_id)
        self.doc_service.get_document_authorized(branch.document_ref, principal)
        return self.version_repo.get_by_branch(branch_id, skip, limit)

    def get_head(self, branch_id: str, principal: Principal) -> Optional[Version]:
        """Latest version of a branch, or None while the branch is empty."""
        branch = self.branch_repo.get_by_id(branch_id)
        self.doc_service.get_document_authorized(branch.document_ref, principal)
        return self.version_repo.get_head(branch_id)

    def get_version(self, version_id: str, principal: Principal) -> Version:
        version = self.version_repo.get_by_id(version_id)
        branch = self.branch_repo.get_by_id(version.branch_id)
        self.doc_service.get_document_authorized(branch.document_ref, principal)
        return version
