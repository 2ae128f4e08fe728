"""Merge audit repository."""

import uuid
from typing import List

from sqlalchemy import or_

from ..exceptions import MergeNotFoundError
from ..models import ActorType, Merge, MergeStrategy
from .base import BaseRepository


class MergeRepository(BaseRepository[Merge]):

    model_class = Merge
    not_found_error = MergeNotFoundError

    def create(
        self,
        source_branch_id: str,
        target_branch_id: str,
        merged_version_id: str,
        merged_by_type: ActorType,
        merged_by_id: str,
        strategy: MergeStrategy,
    ) -> Merge:
        merge = Merge(
            id=str(uuid.uuid4()),
            source_branch_id=source_branch_id,
            target_branch_id=target_branch_id,
            merged_version_id=merged_version_id,
            merged_by_type=merged_by_type,
            merged_by_id=merged_by_id,
            merge_strategy=strategy,
        )
        return self.add(merge)

    def get_by_branch(self, branch_id: str, limit: int = 100) -> List[Merge]:
        """Merges where the branch is source or target, newest first."""
        return self._base_query().filter(
            or_(Merge.source_branch_id == branch_id, Merge.target_branch_id == branch_id)
        ).order_by(Merge.created_at.desc(), Merge.id.desc()).limit(limit).all()
