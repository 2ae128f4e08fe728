"""Document service: the document-store adapter this core depends on.

Resolves composite document references, enforces the access rule, and
creates documents. Live content is only ever written by the pending change
queue (accept / push).
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import DocumentNotFoundError, ForbiddenError, ValidationError
from ..models import Document, DocumentRef, Visibility
from ..repositories import DocumentRepository
from .permission_service import can_access

logger = logging.getLogger(__name__)


class DocumentService:
    """Document lookup, access control and creation."""

    def __init__(self, db: Session):
        self.db = db
        self.doc_repo = DocumentRepository(db)

    def create_document(
        self,
        title: str,
        principal: Principal,
        content: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> Document:
        """Create a document owned by *principal*. A new (id, created_at) lineage."""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title")
        if content is None:
            raise ValidationError("Content is required", field="content")

        with transaction(self.db):
            document = self.doc_repo.create(title, content, visibility, principal.user_id)

        logger.info(
            "Document created",
            extra={"doc_id": document.id, "owner_id": principal.user_id, "visibility": visibility.value},
        )
        return document

    def resolve_ref(self, doc_id: str, created_at: Optional[datetime] = None) -> DocumentRef:
        """Build a DocumentRef from an id and optional creation timestamp.

        Without *created_at* the oldest lineage of *doc_id* is used.
        """
        if created_at is not None:
            return DocumentRef(doc_id, created_at)
        document = self.doc_repo.get_oldest_by_id(doc_id)
        if document is None:
            raise DocumentNotFoundError(doc_id)
        return document.ref

    def get_document(self, ref: DocumentRef) -> Document:
        return self.doc_repo.get_by_ref(ref)

    def get_document_authorized(self, ref: DocumentRef, principal: Principal) -> Document:
        """Load a document and verify access. Raises DocumentNotFoundError / ForbiddenError."""
        document = self.doc_repo.get_by_ref(ref)
        if not can_access(document, principal):
            logger.warning(
                "Access denied",
                extra={"doc_id": ref.document_id, "user_id": principal.user_id},
            )
            raise ForbiddenError("Only the owner can access a private document")
        return document
