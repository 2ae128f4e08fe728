"""Version and Merge models. Both are append-only."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base
from .document import utcnow
from .enums import ActorType, MergeStrategy, enum_column_type


class Version(Base):
    """Immutable full-content snapshot on a branch.

    Versions of one branch form a linear chain through parent_version_id.
    ``sequence`` is the 1-based position in that chain; the unique
    (branch_id, sequence) pair is what stops two concurrent commits from
    both claiming the same parent.
    """

    __tablename__ = "versions"
    __table_args__ = (
        UniqueConstraint("branch_id", "sequence", name="uq_versions_branch_sequence"),
        Index("ix_versions_branch_id", "branch_id"),
        Index("ix_versions_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)

    content = Column(Text, nullable=False)
    commit_message = Column(Text, nullable=True)

    author_type = Column(enum_column_type(ActorType), nullable=False)
    author_id = Column(String(100), nullable=False)

    parent_version_id = Column(String(36), ForeignKey("versions.id"), nullable=True)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    branch = relationship("Branch", back_populates="versions")


class Merge(Base):
    """Audit record of one merge. Never mutated."""

    __tablename__ = "merges"
    __table_args__ = (
        Index("ix_merges_source_branch_id", "source_branch_id"),
        Index("ix_merges_target_branch_id", "target_branch_id"),
    )

    id = Column(String(36), primary_key=True)
    source_branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    target_branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    merged_version_id = Column(String(36), ForeignKey("versions.id"), nullable=False)

    merged_by_type = Column(enum_column_type(ActorType), nullable=False)
    merged_by_id = Column(String(100), nullable=False)
    merge_strategy = Column(enum_column_type(MergeStrategy), nullable=False, default=MergeStrategy.MANUAL)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    merged_version = relationship("Version")
