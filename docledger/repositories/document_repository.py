"""Document repository for database operations.

Every lookup and write is keyed on the composite (id, created_at) identity.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import exists, update

from ..exceptions import DocumentNotFoundError
from ..models import Document, DocumentRef, PendingChange, PendingChangeStatus, Visibility
from ..models.document import utcnow
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for the document slice this core maintains."""

    model_class = Document
    not_found_error = DocumentNotFoundError

    def create(self, title: str, content: str, visibility: Visibility, owner_id: str) -> Document:
        now = utcnow()
        document = Document(
            id=str(uuid.uuid4()),
            created_at=now,
            title=title,
            content=content,
            visibility=visibility,
            owner_id=owner_id,
            has_unpushed_changes=False,
            updated_at=now,
        )
        return self.add(document)

    def get_by_ref_optional(self, ref: DocumentRef) -> Optional[Document]:
        return self._base_query().filter(
            Document.id == ref.document_id,
            Document.created_at == ref.document_created_at,
        ).first()

    def get_by_ref(self, ref: DocumentRef) -> Document:
        document = self.get_by_ref_optional(ref)
        if document is None:
            raise DocumentNotFoundError(ref.document_id)
        return document

    def get_oldest_by_id(self, doc_id: str) -> Optional[Document]:
        """First lineage of a document id (ordered by creation time)."""
        return self._base_query().filter(
            Document.id == doc_id
        ).order_by(Document.created_at.asc()).first()

    def set_content(self, ref: DocumentRef, content: str, updated_at: Optional[datetime] = None) -> None:
        """Overwrite live content and bump updated_at. Raises DocumentNotFoundError."""
        result = self.db.execute(
            update(Document)
            .where(Document.id == ref.document_id, Document.created_at == ref.document_created_at)
            .values(content=content, updated_at=updated_at or utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise DocumentNotFoundError(ref.document_id)

    def mark_unpushed(self, ref: DocumentRef) -> None:
        """Set has_unpushed_changes = true. Idempotent."""
        self.db.execute(
            update(Document)
            .where(Document.id == ref.document_id, Document.created_at == ref.document_created_at)
            .values(has_unpushed_changes=True)
            .execution_options(synchronize_session=False)
        )

    def recompute_unpushed(self, ref: DocumentRef) -> bool:
        """Recompute has_unpushed_changes from the pending changes table.

        A single UPDATE with an EXISTS subquery, so the flag reflects the
        rows visible to this transaction. Returns the new flag value.
        """
        pending_exists = exists().where(
            PendingChange.document_id == ref.document_id,
            PendingChange.document_created_at == ref.document_created_at,
            PendingChange.status == PendingChangeStatus.PENDING,
        )
        self.db.execute(
            update(Document)
            .where(Document.id == ref.document_id, Document.created_at == ref.document_created_at)
            .values(has_unpushed_changes=pending_exists)
            .execution_options(synchronize_session=False)
        )
        return bool(self.db.query(pending_exists).scalar())
