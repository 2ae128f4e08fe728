"""Pending change model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKeyConstraint, Index, String, Text

from ..database import Base
from .document import DocumentScoped, utcnow
from .enums import ActorType, ChangeType, PendingChangeStatus, enum_column_type


class PendingChange(DocumentScoped, Base):
    """A staged edit waiting to be accepted or rejected.

    ``changes`` is an opaque diff/patch payload; nothing in this package
    interprets it. Status transitions: pending -> accepted | rejected, once.
    """

    __tablename__ = "pending_changes"
    __table_args__ = (
        ForeignKeyConstraint(
            ["document_id", "document_created_at"],
            ["documents.id", "documents.created_at"],
        ),
        Index("ix_pending_changes_document_status", "document_id", "document_created_at", "status"),
    )

    id = Column(String(36), primary_key=True)

    document_id = Column(String(36), nullable=False)
    document_created_at = Column(DateTime(timezone=True), nullable=False)

    changes = Column(JSON, nullable=False)
    description = Column(Text, nullable=False)
    change_type = Column(enum_column_type(ChangeType), nullable=False)

    author_type = Column(enum_column_type(ActorType), nullable=False)
    author_id = Column(String(100), nullable=False)  # user id or chat message id

    status = Column(
        enum_column_type(PendingChangeStatus),
        nullable=False,
        default=PendingChangeStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
