"""Version repository: append and read, never update or delete."""

import uuid
from typing import List, Optional

from ..exceptions import VersionNotFoundError
from ..models import ActorType, Version
from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Repository for the append-only version ledger."""

    model_class = Version
    not_found_error = VersionNotFoundError

    def get_head(self, branch_id: str) -> Optional[Version]:
        """Latest version of a branch, or None for an empty branch."""
        return self._base_query().filter(
            Version.branch_id == branch_id
        ).order_by(Version.sequence.desc()).first()

    def append(
        self,
        branch_id: str,
        content: str,
        commit_message: Optional[str],
        author_type: ActorType,
        author_id: str,
    ) -> Version:
        """Append a version whose parent is the branch's current head.

        Callers must hold the branch row lock (BranchRepository.get_for_update)
        in the same transaction. A concurrent append that slipped past the
        lock fails the (branch_id, sequence) unique constraint on flush.
        """
        head = self.get_head(branch_id)
        version = Version(
            id=str(uuid.uuid4()),
            branch_id=branch_id,
            content=content,
            commit_message=commit_message,
            author_type=author_type,
            author_id=author_id,
            parent_version_id=head.id if head else None,
            sequence=head.sequence + 1 if head else 1,
        )
        return self.add(version)

    def get_by_branch(self, branch_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Version]:
        """Versions of a branch, newest first."""
        query = self._base_query().filter(
            Version.branch_id == branch_id
        ).order_by(Version.sequence.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()
