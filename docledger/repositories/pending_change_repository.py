"""Pending change repository."""

import uuid
from typing import Any, List

from sqlalchemy import update

from ..exceptions import AlreadyResolvedError, PendingChangeNotFoundError
from ..models import ActorType, ChangeType, DocumentRef, PendingChange, PendingChangeStatus
from ..models.document import utcnow
from .base import BaseRepository


class PendingChangeRepository(BaseRepository[PendingChange]):

    model_class = PendingChange
    not_found_error = PendingChangeNotFoundError

    def create(
        self,
        ref: DocumentRef,
        changes: Any,
        description: str,
        change_type: ChangeType,
        author_type: ActorType,
        author_id: str,
    ) -> PendingChange:
        change = PendingChange(
            id=str(uuid.uuid4()),
            document_id=ref.document_id,
            document_created_at=ref.document_created_at,
            changes=changes,
            description=description,
            change_type=change_type,
            author_type=author_type,
            author_id=author_id,
            status=PendingChangeStatus.PENDING,
        )
        return self.add(change)

    def get_pending(self, ref: DocumentRef) -> List[PendingChange]:
        """Unresolved changes for a document, oldest first (review order)."""
        return self._base_query().filter(
            PendingChange.document_id == ref.document_id,
            PendingChange.document_created_at == ref.document_created_at,
            PendingChange.status == PendingChangeStatus.PENDING,
        ).order_by(PendingChange.created_at.asc(), PendingChange.id.asc()).all()

    def transition(self, change_id: str, status: PendingChangeStatus) -> None:
        """Compare-and-swap pending -> *status*, stamping resolved_at.

        Raises PendingChangeNotFoundError or AlreadyResolvedError when no row
        was updated.
        """
        result = self.db.execute(
            update(PendingChange)
            .where(
                PendingChange.id == change_id,
                PendingChange.status == PendingChangeStatus.PENDING,
            )
            .values(status=status, resolved_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = self.get_by_id_optional(change_id)
            if current is None:
                raise PendingChangeNotFoundError(change_id)
            self.db.refresh(current)
            raise AlreadyResolvedError(change_id, current.status.value)
