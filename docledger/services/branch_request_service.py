"""Branch request service: approval gate for AI-proposed branches.

pending -> approved | rejected, exactly once. Approval does not create the
branch; the caller materializes it with BranchService.create_branch using
the (possibly renamed) proposed name.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import ForbiddenError, ValidationError
from ..models import BranchRequest, BranchRequestStatus, DocumentRef
from ..repositories import BranchRequestRepository
from .branch_service import _clean_name
from .document_service import DocumentService

logger = logging.getLogger(__name__)


class BranchRequestService:

    def __init__(self, db: Session):
        self.db = db
        self.request_repo = BranchRequestRepository(db)
        self.doc_service = DocumentService(db)

    def create_branch_request(
        self,
        ref: DocumentRef,
        proposed_name: str,
        principal: Principal,
        reason: Optional[str] = None,
        requested_by_id: Optional[str] = None,
    ) -> BranchRequest:
        """File a pending request on behalf of an AI assistant.

        *requested_by_id* defaults to the caller; an orchestrator acting for
        an assistant can name the assistant explicitly.
        """
        proposed_name = _clean_name(proposed_name)
        with transaction(self.db):
            self.doc_service.get_document_authorized(ref, principal)
            request = self.request_repo.create(
                ref, proposed_name, reason, requested_by_id or principal.user_id
            )

        logger.info(
            "Branch request created",
            extra={"request_id": request.id, "doc_id": ref.document_id, "proposed_name": proposed_name},
        )
        return request

    def list_branch_requests(self, ref: DocumentRef, principal: Principal) -> List[BranchRequest]:
        """All requests for a document regardless of status, newest first."""
        self.doc_service.get_document_authorized(ref, principal)
        return self.request_repo.get_by_document(ref)

    def resolve_branch_request(
        self,
        request_id: str,
        decision: BranchRequestStatus,
        principal: Principal,
        final_name: Optional[str] = None,
    ) -> BranchRequest:
        """Approve or reject a pending request.

        Raises:
            ForbiddenError: caller is not a human user.
            ValidationError: *decision* is not a terminal status.
            BranchRequestNotFoundError: no such request.
            AlreadyResolvedError: the request was resolved before.
        """
        if not principal.is_human:
            raise ForbiddenError("Only a human user can resolve branch requests")
        if decision not in (BranchRequestStatus.APPROVED, BranchRequestStatus.REJECTED):
            raise ValidationError("Decision must be 'approved' or 'rejected'", field="decision")
        if final_name is not None:
            final_name = _clean_name(final_name)

        with transaction(self.db):
            current = self.request_repo.get_by_id(request_id)
            self.doc_service.get_document_authorized(current.document_ref, principal)
            request = self.request_repo.resolve(request_id, decision, final_name)

        logger.info(
            "Branch request resolved",
            extra={
                "request_id": request_id,
                "status": decision.value,
                "final_name": request.proposed_name,
                "resolved_by": principal.user_id,
            },
        )
        return request
