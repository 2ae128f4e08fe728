"""Merge service: records provenance of combining two branches.

There is no diffing here. An ``auto`` merge replaces the target content with
the source head; a ``manual`` merge takes content the caller has already
reconciled. Either way the result is one new version on the target branch
plus one Merge audit row, written in a single transaction. The source
branch is only read.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..database import transaction
from ..exceptions import ConflictError, ValidationError
from ..models import Merge, MergeStrategy, Version
from ..repositories import BranchRepository, MergeRepository, VersionRepository
from .document_service import DocumentService
from .version_service import VersionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    merge: Merge
    version: Version


class MergeService:

    def __init__(self, db: Session):
        self.db = db
        self.branch_repo = BranchRepository(db)
        self.version_repo = VersionRepository(db)
        self.merge_repo = MergeRepository(db)
        self.doc_service = DocumentService(db)
        self.version_service = VersionService(db)

    def merge(
        self,
        source_branch_id: str,
        target_branch_id: str,
        strategy: MergeStrategy,
        principal: Principal,
        content: Optional[str] = None,
    ) -> MergeResult:
        """Merge *source* into *target*.

        Raises:
            BranchNotFoundError: either branch is missing.
            ValidationError: same branch twice, branches of different
                documents, or content missing (manual) / supplied (auto).
            ConflictError: either branch has no version yet, or the target
                is inactive.
        """
        if source_branch_id == target_branch_id:
            raise ValidationError("Cannot merge a branch into itself", field="target_branch_id")

        with transaction(self.db):
            # Lock both rows in a fixed order so opposite merges cannot deadlock.
            locked = {
                branch_id: self.branch_repo.get_for_update(branch_id)
                for branch_id in sorted((source_branch_id, target_branch_id))
            }
            source = locked[source_branch_id]
            target = locked[target_branch_id]

            if not source.document_ref.same_as(target.document_ref):
                raise ValidationError("Branches belong to different documents")
            self.doc_service.get_document_authorized(target.document_ref, principal)

            source_head = self.version_repo.get_head(source.id)
            if source_head is None:
                raise ConflictError(source.id, "Source branch has no versions to merge")
            if self.version_repo.get_head(target.id) is None:
                raise ConflictError(target.id, "Target branch has no versions yet")

            merged_content = self._resolve_content(strategy, source_head, content)
            version = self.version_service.append_to_branch(
                target,
                merged_content,
                f"Merge branch '{source.name}' into '{target.name}'",
                principal.actor_type,
                principal.user_id,
            )
            merge = self.merge_repo.create(
                source.id,
                target.id,
                version.id,
                principal.actor_type,
                principal.user_id,
                strategy,
            )

        logger.info(
            "Branches merged",
            extra={
                "merge_id": merge.id,
                "source_branch_id": source_branch_id,
                "target_branch_id": target_branch_id,
                "strategy": strategy.value,
                "version_id": version.id,
            },
        )
        return MergeResult(merge=merge, version=version)

    @staticmethod
    def _resolve_content(strategy: MergeStrategy, source_head: Version, content: Optional[str]) -> str:
        if strategy == MergeStrategy.AUTO:
            if content is not None:
                raise ValidationError("Content is only accepted for manual merges", field="content")
            return source_head.content
        if strategy == MergeStrategy.MANUAL:
            if content is None:
                raise ValidationError("Manual merges require the reconciled content", field="content")
            return content
        raise ValidationError(f"Unknown merge strategy: {strategy}", field="strategy")

    def list_merges(self, branch_id: str, principal: Principal, limit: int = 100) -> List[Merge]:
        """Merges into or out of a branch, newest first."""
        branch = self.branch_repo.get_by_id(branch_id)
        self.doc_service.get_document_authorized(branch.document_ref, principal)
        return self.merge_repo.get_by_branch(branch_id, limit)
