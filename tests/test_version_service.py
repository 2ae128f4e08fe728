"""Tests for VersionService: append-only ledger and head consistency."""

import pytest

from docledger.exceptions import (
    BranchNotFoundError,
    ConflictError,
    ForbiddenError,
    ValidationError,
    VersionNotFoundError,
)
from docledger.models import ActorType, Version
from docledger.repositories import VersionRepository
from docledger.services import BranchService, VersionService


def walk_chain(db, head):
    """Follow parent_version_id from *head* to the root."""
    seen = []
    current = head
    while current is not None:
        seen.append(current)
        current = db.get(Version, current.parent_version_id) if current.parent_version_id else None
    return seen


@pytest.fixture()
def branch(db, document, alice):
    return BranchService(db).create_branch(document.ref, "main", alice)


class TestCommitVersion:

    def test_first_commit_has_no_parent(self, db, branch, alice):
        version = VersionService(db).commit_version(branch.id, "hello", alice, "init")

        assert version.parent_version_id is None
        assert version.sequence == 1
        assert version.content == "hello"
        assert version.commit_message == "init"
        assert version.author_type == ActorType.USER
        assert version.author_id == "alice"

    def test_commits_chain_to_previous_head(self, db, branch, alice):
        service = VersionService(db)
        v1 = service.commit_version(branch.id, "one", alice)
        v2 = service.commit_version(branch.id, "two", alice)
        v3 = service.commit_version(branch.id, "three", alice)

        assert v2.parent_version_id == v1.id
        assert v3.parent_version_id == v2.id
        assert [v.sequence for v in (v1, v2, v3)] == [1, 2, 3]

    def test_chain_walk_reaches_every_version_once(self, db, document, alice):
        branches = BranchService(db)
        main = branches.create_branch(document.ref, "main", alice)
        other = branches.create_branch(document.ref, "other", alice, parent_branch_id=main.id)
        service = VersionService(db)
        for i in range(5):
            service.commit_version(main.id, f"main {i}", alice)
            service.commit_version(other.id, f"other {i}", alice)

        for b in (main, other):
            head = service.get_head(b.id, alice)
            chain = walk_chain(db, head)
            ids = [v.id for v in chain]
            assert len(ids) == len(set(ids))
            assert set(ids) == {v.id for v in service.list_versions(b.id, alice)}
            assert all(v.branch_id == b.id for v in chain)

    def test_empty_content_is_allowed(self, db, branch, alice):
        version = VersionService(db).commit_version(branch.id, "", alice)
        assert version.content == ""

    def test_missing_content_rejected(self, db, branch, alice):
        with pytest.raises(ValidationError):
            VersionService(db).commit_version(branch.id, None, alice)

    def test_unknown_branch(self, db, alice):
        with pytest.raises(BranchNotFoundError):
            VersionService(db).commit_version("missing", "x", alice)

    def test_inactive_branch_conflicts(self, db, branch, alice):
        BranchService(db).deactivate_branch(branch.id, alice)
        with pytest.raises(ConflictError):
            VersionService(db).commit_version(branch.id, "x", alice)

    def test_private_document_owner_only(self, db, branch, bob):
        with pytest.raises(ForbiddenError):
            VersionService(db).commit_version(branch.id, "x", bob)

    def test_ai_author_recorded(self, db, team_document, alice, assistant):
        branch = BranchService(db).create_branch(team_document.ref, "main", alice)
        version = VersionService(db).commit_version(branch.id, "draft", assistant)
        assert version.author_type == ActorType.AI
        assert version.author_id == "assistant-1"

    def test_stale_head_becomes_conflict_and_rolls_back(self, db, branch, alice, monkeypatch):
        service = VersionService(db)
        first = service.commit_version(branch.id, "one", alice)

        # Simulate a writer that computed its parent before `first` landed.
        monkeypatch.setattr(VersionRepository, "get_head", lambda self, branch_id: None)
        with pytest.raises(ConflictError):
            service.commit_version(branch.id, "racing", alice)
        monkeypatch.undo()

        versions = service.list_versions(branch.id, alice)
        assert [v.id for v in versions] == [first.id]

    def test_stale_head_conflict_reports_branch_id(self, db, branch, alice, monkeypatch):
        service = VersionService(db)
        service.commit_version(branch.id, "one", alice)
        branch_id = branch.id

        monkeypatch.setattr(VersionRepository, "get_head", lambda self, branch_id: None)
        with pytest.raises(ConflictError) as exc_info:
            service.commit_version(branch_id, "racing", alice)
        assert exc_info.value.status_code == 409
        assert exc_info.value.details["resource_id"] == branch_id

    def test_parallel_commits_keep_chain_linear(self, db, branch, alice, run_in_parallel):
        branch_id = branch.id
        VersionService(db).commit_version(branch_id, "base", alice)

        def work(session):
            return VersionService(session).commit_version(branch_id, "racing", alice).id

        outcomes = run_in_parallel(work)

        failures = [o for o in outcomes if isinstance(o, Exception)]
        winners = [o for o in outcomes if isinstance(o, str)]
        assert len(failures) + len(winners) == len(outcomes)
        assert winners
        assert all(isinstance(f, ConflictError) for f in failures), failures

        db.expire_all()
        service = VersionService(db)
        listed = service.list_versions(branch_id, alice)
        chain = walk_chain(db, service.get_head(branch_id, alice))
        ids = [v.id for v in chain]
        assert len(ids) == len(set(ids))
        assert set(ids) == {v.id for v in listed}
        assert set(winners) <= set(ids)
        assert len(listed) == 1 + len(winners)


class TestReadVersions:

    def test_list_is_newest_first_and_paginates(self, db, branch, alice):
        service = VersionService(db)
        for i in range(5):
            service.commit_version(branch.id, f"v{i}", alice)

        all_versions = service.list_versions(branch.id, alice)
        assert [v.content for v in all_versions] == ["v4", "v3", "v2", "v1", "v0"]

        page = service.list_versions(branch.id, alice, skip=1, limit=2)
        assert [v.content for v in page] == ["v3", "v2"]

    def test_head_of_empty_branch_is_none(self, db, branch, alice):
        assert VersionService(db).get_head(branch.id, alice) is None

    def test_get_version(self, db, branch, alice):
        service = VersionService(db)
        version = service.commit_version(branch.id, "x", alice)
        assert service.get_version(version.id, alice).id == version.id

    def test_get_missing_version(self, db, alice):
        with pytest.raises(VersionNotFoundError):
            VersionService(db).get_version("nope", alice)
