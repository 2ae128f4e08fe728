"""Branch and BranchRequest models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, ForeignKeyConstraint, Index, String, Text
from sqlalchemy.orm import relationship

from ..database import Base
from .document import DocumentScoped, utcnow
from .enums import ActorType, BranchRequestStatus, enum_column_type


class Branch(DocumentScoped, Base):
    """A named line of history for one document.

    parent_branch_id forms a tree; cycle-freedom is the caller's contract.
    Never hard-deleted: is_active=False hides it from listings.
    """

    __tablename__ = "branches"
    __table_args__ = (
        ForeignKeyConstraint(
            ["document_id", "document_created_at"],
            ["documents.id", "documents.created_at"],
        ),
        Index("ix_branches_document", "document_id", "document_created_at"),
    )

    id = Column(String(36), primary_key=True)

    document_id = Column(String(36), nullable=False)
    document_created_at = Column(DateTime(timezone=True), nullable=False)

    name = Column(String(255), nullable=False)
    parent_branch_id = Column(String(36), ForeignKey("branches.id"), nullable=True)

    created_by_type = Column(enum_column_type(ActorType), nullable=False)
    created_by_id = Column(String(100), nullable=False)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    parent = relationship("Branch", remote_side=[id])
    versions = relationship("Version", back_populates="branch", order_by="Version.sequence")


class BranchRequest(DocumentScoped, Base):
    """An AI proposal to create a branch, waiting on a human decision.

    Status transitions: pending -> approved | rejected, once.
    """

    __tablename__ = "branch_requests"
    __table_args__ = (
        ForeignKeyConstraint(
            ["document_id", "document_created_at"],
            ["documents.id", "documents.created_at"],
        ),
        Index("ix_branch_requests_document", "document_id", "document_created_at"),
    )

    id = Column(String(36), primary_key=True)

    document_id = Column(String(36), nullable=False)
    document_created_at = Column(DateTime(timezone=True), nullable=False)

    proposed_name = Column(String(255), nullable=False)
    reason = Column(Text, nullable=True)

    requested_by_type = Column(enum_column_type(ActorType), nullable=False, default=ActorType.AI)
    requested_by_id = Column(String(100), nullable=False)  # user id or chat message id

    status = Column(
        enum_column_type(BranchRequestStatus),
        nullable=False,
        default=BranchRequestStatus.PENDING,
    )
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
