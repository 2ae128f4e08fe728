"""Document model and its composite identity."""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from ..database import Base
from .enums import Visibility, enum_column_type


def utcnow() -> datetime:
    """Timestamp source for every created_at / updated_at / resolved_at column."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentRef:
    """Two-part document identity: (document_id, document_created_at).

    Each creation event of a document id starts its own lineage, so the id
    alone never identifies a document. Every table that points at a document
    stores both parts. Aware timestamps are normalized to UTC; naive ones are
    taken to be UTC already (SQLite hands them back that way).
    """

    document_id: str
    document_created_at: datetime

    def __post_init__(self):
        ts = self.document_created_at
        if ts.tzinfo is not None:
            object.__setattr__(self, "document_created_at", ts.astimezone(timezone.utc))

    def same_as(self, other: "DocumentRef") -> bool:
        """Equality that ignores whether either timestamp carries tzinfo."""
        return (
            self.document_id == other.document_id
            and _naive_utc(self.document_created_at) == _naive_utc(other.document_created_at)
        )


def _naive_utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=None) if ts.tzinfo is not None else ts


class DocumentScoped:
    """Mixin for rows that point at a document through the composite key."""

    @property
    def document_ref(self) -> DocumentRef:
        return DocumentRef(self.document_id, self.document_created_at)


class Document(Base):
    """The slice of the document store this core reads and maintains."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner_id", "owner_id"),
    )

    # Composite primary key
    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), primary_key=True, default=utcnow)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    visibility = Column(enum_column_type(Visibility), nullable=False, default=Visibility.PRIVATE)
    owner_id = Column(String(100), nullable=False)

    # Derived: true iff a pending change with status 'pending' exists.
    has_unpushed_changes = Column(Boolean, nullable=False, default=False)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def ref(self) -> DocumentRef:
        return DocumentRef(self.id, self.created_at)
