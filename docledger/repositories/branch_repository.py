"""Branch repository for database operations."""

import uuid
from typing import List, Optional

from sqlalchemy import update

from ..exceptions import BranchNotFoundError
from ..models import ActorType, Branch, DocumentRef
from .base import BaseRepository


class BranchRepository(BaseRepository[Branch]):
    """Repository for branch CRUD. Branches are never deleted."""

    model_class = Branch
    not_found_error = BranchNotFoundError

    def create(
        self,
        ref: DocumentRef,
        name: str,
        parent_branch_id: Optional[str],
        created_by_type: ActorType,
        created_by_id: str,
    ) -> Branch:
        branch = Branch(
            id=str(uuid.uuid4()),
            document_id=ref.document_id,
            document_created_at=ref.document_created_at,
            name=name,
            parent_branch_id=parent_branch_id,
            created_by_type=created_by_type,
            created_by_id=created_by_id,
            is_active=True,
        )
        return self.add(branch)

    def get_for_update(self, branch_id: str) -> Branch:
        """Load a branch holding a row lock until the transaction ends.

        Serializes head computation for concurrent commits on PostgreSQL;
        SQLite ignores FOR UPDATE and serializes writers on its own.
        """
        branch = (
            self.db.query(Branch)
            .filter(Branch.id == branch_id)
            .with_for_update()
            .first()
        )
        if branch is None:
            raise BranchNotFoundError(branch_id)
        return branch

    def list_active(self, ref: DocumentRef) -> List[Branch]:
        """Active branches of a document, newest first."""
        return self._base_query().filter(
            Branch.document_id == ref.document_id,
            Branch.document_created_at == ref.document_created_at,
            Branch.is_active.is_(True),
        ).order_by(Branch.created_at.desc(), Branch.id.desc()).all()

    def find_active_by_name(self, ref: DocumentRef, name: str) -> Optional[Branch]:
        """Oldest active branch of a document carrying *name*."""
        return self._base_query().filter(
            Branch.document_id == ref.document_id,
            Branch.document_created_at == ref.document_created_at,
            Branch.name == name,
            Branch.is_active.is_(True),
        ).order_by(Branch.created_at.asc(), Branch.id.asc()).first()

    def deactivate(self, branch_id: str) -> bool:
        """Soft-deactivate. Returns False if the branch was already inactive."""
        result = self.db.execute(
            update(Branch)
            .where(Branch.id == branch_id, Branch.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
