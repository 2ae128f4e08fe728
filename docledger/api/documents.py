"""Document API endpoints.

The document store is an external collaborator in production; these routes
expose the slice this service maintains so the ledger can be driven end to
end.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..models import DocumentRef
from ..schemas.document import DocumentCreate, DocumentResponse
from ..services import DocumentService

router = APIRouter(prefix="/api/documents", tags=["documents"])


def resolve_document_ref(
    doc_id: str,
    created_at: Optional[datetime] = Query(
        None, description="Creation timestamp of the lineage; oldest when omitted"
    ),
    db: Session = Depends(get_db),
) -> DocumentRef:
    """Dependency turning ``{doc_id}`` + ``?created_at=`` into a DocumentRef."""
    return DocumentService(db).resolve_ref(doc_id, created_at)


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(
    document: DocumentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Create a document owned by the caller."""
    service = DocumentService(db)
    return service.create_document(
        document.title, principal, content=document.content, visibility=document.visibility
    )


@router.get("/{doc_id}", response_model=DocumentResponse)
def get_document(
    ref: DocumentRef = Depends(resolve_document_ref),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Get a document, including its ``has_unpushed_changes`` flag."""
    return DocumentService(db).get_document_authorized(ref, principal)
