"""Tests for MergeService."""

import pytest

from docledger.exceptions import (
    BranchNotFoundError,
    ConflictError,
    ForbiddenError,
    ValidationError,
)
from docledger.models import Merge, MergeStrategy
from docledger.services import BranchService, DocumentService, MergeService, VersionService


@pytest.fixture()
def branches(db, document, alice):
    """main (one version) and feature (two versions) on the same document."""
    branch_service = BranchService(db)
    versions = VersionService(db)
    main = branch_service.create_branch(document.ref, "main", alice)
    feature = branch_service.create_branch(document.ref, "feature", alice, parent_branch_id=main.id)
    versions.commit_version(main.id, "base", alice)
    versions.commit_version(feature.id, "feature draft", alice)
    versions.commit_version(feature.id, "feature final", alice)
    return main, feature


def merge_count(db) -> int:
    return db.query(Merge).count()


class TestMerge:

    def test_auto_takes_source_head(self, db, branches, alice):
        main, feature = branches
        target_head = VersionService(db).get_head(main.id, alice)

        result = MergeService(db).merge(feature.id, main.id, MergeStrategy.AUTO, alice)

        assert result.version.content == "feature final"
        assert result.version.branch_id == main.id
        assert result.version.parent_version_id == target_head.id
        assert result.version.commit_message == "Merge branch 'feature' into 'main'"
        assert result.merge.source_branch_id == feature.id
        assert result.merge.target_branch_id == main.id
        assert result.merge.merged_version_id == result.version.id
        assert result.merge.merge_strategy == MergeStrategy.AUTO
        assert result.merge.merged_by_id == "alice"

    def test_manual_uses_supplied_content(self, db, branches, alice):
        main, feature = branches
        result = MergeService(db).merge(
            feature.id, main.id, MergeStrategy.MANUAL, alice, content="reconciled"
        )
        assert result.version.content == "reconciled"
        assert result.merge.merge_strategy == MergeStrategy.MANUAL

    def test_source_untouched_and_exactly_one_append(self, db, branches, alice):
        main, feature = branches
        versions = VersionService(db)
        source_before = [v.id for v in versions.list_versions(feature.id, alice)]
        target_before = len(versions.list_versions(main.id, alice))
        merges_before = merge_count(db)

        MergeService(db).merge(feature.id, main.id, MergeStrategy.AUTO, alice)

        assert [v.id for v in versions.list_versions(feature.id, alice)] == source_before
        assert len(versions.list_versions(main.id, alice)) == target_before + 1
        assert merge_count(db) == merges_before + 1

    def test_manual_without_content(self, db, branches, alice):
        main, feature = branches
        with pytest.raises(ValidationError):
            MergeService(db).merge(feature.id, main.id, MergeStrategy.MANUAL, alice)
        assert merge_count(db) == 0

    def test_auto_with_content(self, db, branches, alice):
        main, feature = branches
        with pytest.raises(ValidationError):
            MergeService(db).merge(feature.id, main.id, MergeStrategy.AUTO, alice, content="x")

    def test_same_branch(self, db, branches, alice):
        main, _ = branches
        with pytest.raises(ValidationError):
            MergeService(db).merge(main.id, main.id, MergeStrategy.AUTO, alice)

    def test_branches_of_different_documents(self, db, branches, alice):
        main, _ = branches
        other_doc = DocumentService(db).create_document("Other", alice)
        other = BranchService(db).create_branch(other_doc.ref, "main", alice)
        VersionService(db).commit_version(other.id, "elsewhere", alice)

        with pytest.raises(ValidationError):
            MergeService(db).merge(other.id, main.id, MergeStrategy.AUTO, alice)

    def test_empty_source_conflicts(self, db, document, branches, alice):
        main, _ = branches
        empty = BranchService(db).create_branch(document.ref, "empty", alice)
        with pytest.raises(ConflictError):
            MergeService(db).merge(empty.id, main.id, MergeStrategy.AUTO, alice)

    def test_empty_target_conflicts(self, db, document, branches, alice):
        _, feature = branches
        empty = BranchService(db).create_branch(document.ref, "empty", alice)
        with pytest.raises(ConflictError):
            MergeService(db).merge(feature.id, empty.id, MergeStrategy.AUTO, alice)
        assert VersionService(db).get_head(empty.id, alice) is None

    def test_inactive_target_conflicts(self, db, branches, alice):
        main, feature = branches
        BranchService(db).deactivate_branch(main.id, alice)
        with pytest.raises(ConflictError):
            MergeService(db).merge(feature.id, main.id, MergeStrategy.AUTO, alice)
        assert merge_count(db) == 0

    def test_missing_branch(self, db, branches, alice):
        main, _ = branches
        with pytest.raises(BranchNotFoundError):
            MergeService(db).merge("missing", main.id, MergeStrategy.AUTO, alice)

    def test_private_document_forbidden(self, db, branches, bob):
        main, feature = branches
        with pytest.raises(ForbiddenError):
            MergeService(db).merge(feature.id, main.id, MergeStrategy.AUTO, bob)


    def test_parallel_merges_into_one_target(self, db, branches, alice, run_in_parallel):
        main, feature = branches
        main_id, feature_id = main.id, feature.id
        source_before = [v.id for v in VersionService(db).list_versions(feature_id, alice)]

        def work(session):
            result = MergeService(session).merge(feature_id, main_id, MergeStrategy.AUTO, alice)
            return result.version.id

        outcomes = run_in_parallel(work)

        failures = [o for o in outcomes if isinstance(o, Exception)]
        winners = [o for o in outcomes if isinstance(o, str)]
        assert winners
        assert all(isinstance(f, ConflictError) for f in failures), failures

        db.expire_all()
        versions = VersionService(db)
        assert merge_count(db) == len(winners)
        assert [v.id for v in versions.list_versions(feature_id, alice)] == source_before

        target = versions.list_versions(main_id, alice)
        assert len(target) == 1 + len(winners)
        # Newest first, each version's parent is the next one down.
        for newer, older in zip(target, target[1:]):
            assert newer.parent_version_id == older.id
        assert target[-1].parent_version_id is None
        assert set(winners) <= {v.id for v in target}


class TestListMerges:

    def test_lists_both_directions(self, db, branches, alice):
        main, feature = branches
        service = MergeService(db)
        into_main = service.merge(feature.id, main.id, MergeStrategy.AUTO, alice)
        into_feature = service.merge(main.id, feature.id, MergeStrategy.AUTO, alice)

        assert [m.id for m in service.list_merges(main.id, alice)] == [
            into_feature.merge.id,
            into_main.merge.id,
        ]
        assert len(service.list_merges(feature.id, alice)) == 2
