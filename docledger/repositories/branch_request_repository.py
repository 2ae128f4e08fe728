"""Branch request repository."""

import uuid
from typing import List, Optional

from sqlalchemy import update

from ..exceptions import AlreadyResolvedError, BranchRequestNotFoundError
from ..models import ActorType, BranchRequest, BranchRequestStatus, DocumentRef
from ..models.document import utcnow
from .base import BaseRepository


class BranchRequestRepository(BaseRepository[BranchRequest]):

    model_class = BranchRequest
    not_found_error = BranchRequestNotFoundError

    def create(
        self,
        ref: DocumentRef,
        proposed_name: str,
        reason: Optional[str],
        requested_by_id: str,
    ) -> BranchRequest:
        request = BranchRequest(
            id=str(uuid.uuid4()),
            document_id=ref.document_id,
            document_created_at=ref.document_created_at,
            proposed_name=proposed_name,
            reason=reason,
            requested_by_type=ActorType.AI,
            requested_by_id=requested_by_id,
            status=BranchRequestStatus.PENDING,
        )
        return self.add(request)

    def get_by_document(self, ref: DocumentRef) -> List[BranchRequest]:
        """All requests for a document, newest first."""
        return self._base_query().filter(
            BranchRequest.document_id == ref.document_id,
            BranchRequest.document_created_at == ref.document_created_at,
        ).order_by(BranchRequest.created_at.desc(), BranchRequest.id.desc()).all()

    def resolve(
        self,
        request_id: str,
        status: BranchRequestStatus,
        final_name: Optional[str] = None,
    ) -> BranchRequest:
        """Move a pending request to *status* with one conditional UPDATE.

        The WHERE clause includes ``status = 'pending'`` so the check and the
        write are a single atomic step. Zero affected rows means the request
        is missing or another caller resolved it first.
        """
        values = {"status": status, "responded_at": utcnow()}
        if final_name and status == BranchRequestStatus.APPROVED:
            values["proposed_name"] = final_name

        result = self.db.execute(
            update(BranchRequest)
            .where(
                BranchRequest.id == request_id,
                BranchRequest.status == BranchRequestStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = self.get_by_id_optional(request_id)
            if current is None:
                raise BranchRequestNotFoundError(request_id)
            self.db.refresh(current)
            raise AlreadyResolvedError(request_id, current.status.value)

        request = self.get_by_id(request_id)
        self.db.refresh(request)
        return request
