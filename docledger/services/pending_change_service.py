"""Pending change service: staged edits awaiting accept or reject.

Staging never touches live content. Accepting writes the content, appends an
audit version to the document's default branch and resolves the change in
one transaction; rejecting only resolves it. After every create, accept,
reject and push, ``Document.has_unpushed_changes`` is recomputed from the
pending rows so it always equals "some change is still pending".
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import ForbiddenError, ValidationError
from ..models import (
    ActorType,
    ChangeType,
    DocumentRef,
    PendingChange,
    PendingChangeStatus,
    Version,
)
from ..repositories import BranchRepository, DocumentRepository, PendingChangeRepository
from .branch_service import BranchService
from .document_service import DocumentService
from .version_service import VersionService

logger = logging.getLogger(__name__)

PUSH_COMMIT_MESSAGE = "Push local changes"


def accept_commit_message(description: str) -> str:
    return f"Accept change: {description}"


class PendingChangeService:
    """Stage, list, accept and reject pending changes; push direct edits."""

    def __init__(self, db: Session, default_branch_name: str = "main"):
        self.db = db
        self.change_repo = PendingChangeRepository(db)
        self.doc_repo = DocumentRepository(db)
        self.branch_repo = BranchRepository(db)
        self.doc_service = DocumentService(db)
        self.branch_service = BranchService(db, default_branch_name)
        self.version_service = VersionService(db)

    def create_pending_change(
        self,
        ref: DocumentRef,
        changes: Any,
        description: str,
        change_type: ChangeType,
        principal: Principal,
        author_type: Optional[ActorType] = None,
        author_id: Optional[str] = None,
    ) -> PendingChange:
        """Stage an edit and raise the document's unpushed flag.

        *author_type* / *author_id* default to the caller. A chat
        orchestrator passes the assistant message id as *author_id*.
        """
        if changes is None:
            raise ValidationError("Changes payload is required", field="changes")
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required", field="description")

        with transaction(self.db):
            self.doc_service.get_document_authorized(ref, principal)
            change = self.change_repo.create(
                ref,
                changes,
                description,
                change_type,
                author_type or principal.actor_type,
                author_id or principal.user_id,
            )
            self.doc_repo.mark_unpushed(ref)

        logger.info(
            "Pending change created",
            extra={
                "change_id": change.id,
                "doc_id": ref.document_id,
                "change_type": change_type.value,
            },
        )
        return change

    def list_pending_changes(self, ref: DocumentRef, principal: Principal) -> List[PendingChange]:
        """Changes still pending, oldest first."""
        self.doc_service.get_document_authorized(ref, principal)
        return self.change_repo.get_pending(ref)

    def get_pending_change(self, change_id: str, principal: Principal) -> PendingChange:
        change = self.change_repo.get_by_id(change_id)
        self.doc_service.get_document_authorized(change.document_ref, principal)
        return change

    def accept_pending_change(
        self,
        change_id: str,
        new_content: str,
        principal: Principal,
    ) -> Version:
        """Apply a pending change as *new_content*.

        The status transition runs first, so a caller that loses a race on
        the same change fails before any content is written. Everything
        below rolls back together.

        Returns:
            The audit version appended to the default branch.

        Raises:
            PendingChangeNotFoundError, AlreadyResolvedError, ForbiddenError,
            ValidationError
        """
        if new_content is None:
            raise ValidationError("Content is required", field="new_content")
        self._require_human(principal, "accept")

        with transaction(self.db):
            change = self.change_repo.get_by_id(change_id)
            ref = change.document_ref
            self.doc_service.get_document_authorized(ref, principal)

            self.change_repo.transition(change_id, PendingChangeStatus.ACCEPTED)
            self.doc_repo.set_content(ref, new_content)
            version = self._append_to_default_branch(
                ref, new_content, accept_commit_message(change.description), change.author_id
            )
            has_unpushed = self.doc_repo.recompute_unpushed(ref)

        logger.info(
            "Pending change accepted",
            extra={
                "change_id": change_id,
                "doc_id": ref.document_id,
                "version_id": version.id,
                "has_unpushed_changes": has_unpushed,
            },
        )
        return version

    def reject_pending_change(self, change_id: str, principal: Principal) -> PendingChange:
        """Discard a pending change. Document content is left alone."""
        self._require_human(principal, "reject")

        with transaction(self.db):
            change = self.change_repo.get_by_id(change_id)
            ref = change.document_ref
            self.doc_service.get_document_authorized(ref, principal)

            self.change_repo.transition(change_id, PendingChangeStatus.REJECTED)
            has_unpushed = self.doc_repo.recompute_unpushed(ref)

        logger.info(
            "Pending change rejected",
            extra={"change_id": change_id, "doc_id": ref.document_id, "has_unpushed_changes": has_unpushed},
        )
        self.db.refresh(change)
        return change

    def push_local_changes(
        self,
        ref: DocumentRef,
        content: str,
        principal: Principal,
        commit_message: Optional[str] = None,
    ) -> Version:
        """Commit a direct user edit, bypassing staging.

        Writes the content and appends one version to the default branch.
        The unpushed flag is recomputed, not cleared: changes still pending
        keep it raised.
        """
        if content is None:
            raise ValidationError("Content is required", field="content")
        self._require_human(principal, "push")

        with transaction(self.db):
            self.doc_service.get_document_authorized(ref, principal)
            self.doc_repo.set_content(ref, content)
            version = self._append_to_default_branch(
                ref, content, commit_message or PUSH_COMMIT_MESSAGE, principal.user_id
            )
            has_unpushed = self.doc_repo.recompute_unpushed(ref)

        logger.info(
            "Local changes pushed",
            extra={"doc_id": ref.document_id, "version_id": version.id, "has_unpushed_changes": has_unpushed},
        )
        return version

    def _append_to_default_branch(
        self,
        ref: DocumentRef,
        content: str,
        commit_message: str,
        author_id: str,
    ) -> Version:
        branch = self.branch_service.ensure_default_branch(ref, ActorType.USER, author_id)
        branch = self.branch_repo.get_for_update(branch.id)
        return self.version_service.append_to_branch(
            branch, content, commit_message, ActorType.USER, author_id
        )

    @staticmethod
    def _require_human(principal: Principal, action: str) -> None:
        if not principal.is_human:
            raise ForbiddenError(f"Only a human user can {action} pending changes")
