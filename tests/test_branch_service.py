"""Tests for BranchService."""

from datetime import datetime, timezone

import pytest

from docledger.exceptions import (
    BranchNotFoundError,
    DocumentNotFoundError,
    ForbiddenError,
    ValidationError,
)
from docledger.models import ActorType, Branch, DocumentRef
from docledger.models.document import utcnow
from docledger.services import BranchService, DocumentService, VersionService


class TestCreateBranch:

    def test_main_then_experiment(self, db, document, alice):
        service = BranchService(db)
        main = service.create_branch(document.ref, "main", alice)
        experiment = service.create_branch(document.ref, "experiment", alice, parent_branch_id=main.id)

        branches = service.list_branches(document.ref, alice)
        assert {b.name for b in branches} == {"main", "experiment"}
        assert experiment.parent_branch_id == main.id
        assert main.parent_branch_id is None

    def test_creates_no_version(self, db, document, alice):
        branch = BranchService(db).create_branch(document.ref, "main", alice)
        assert VersionService(db).get_head(branch.id, alice) is None

    def test_records_creator(self, db, team_document, assistant):
        branch = BranchService(db).create_branch(team_document.ref, "ai-draft", assistant)
        assert branch.created_by_type == ActorType.AI
        assert branch.created_by_id == "assistant-1"
        assert branch.is_active is True

    def test_name_is_trimmed(self, db, document, alice):
        branch = BranchService(db).create_branch(document.ref, "  feature  ", alice)
        assert branch.name == "feature"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, db, document, alice, name):
        with pytest.raises(ValidationError):
            BranchService(db).create_branch(document.ref, name, alice)

    def test_overlong_name_rejected(self, db, document, alice):
        with pytest.raises(ValidationError):
            BranchService(db).create_branch(document.ref, "x" * 256, alice)

    def test_missing_document(self, db, alice):
        ref = DocumentRef("no-such-doc", utcnow())
        with pytest.raises(DocumentNotFoundError):
            BranchService(db).create_branch(ref, "main", alice)

    def test_same_id_other_lineage_is_a_different_document(self, db, document, alice):
        ref = DocumentRef(document.id, utcnow())
        with pytest.raises(DocumentNotFoundError):
            BranchService(db).create_branch(ref, "main", alice)

    def test_private_document_forbidden_to_others(self, db, document, bob):
        with pytest.raises(ForbiddenError):
            BranchService(db).create_branch(document.ref, "main", bob)

    def test_team_document_open_to_others(self, db, team_document, bob):
        branch = BranchService(db).create_branch(team_document.ref, "bob-branch", bob)
        assert branch.created_by_id == "bob"

    def test_missing_parent(self, db, document, alice):
        with pytest.raises(BranchNotFoundError):
            BranchService(db).create_branch(document.ref, "child", alice, parent_branch_id="missing")

    def test_parent_from_other_document_rejected(self, db, document, alice):
        other = DocumentService(db).create_document("Other", alice)
        service = BranchService(db)
        foreign = service.create_branch(other.ref, "main", alice)

        with pytest.raises(ValidationError):
            service.create_branch(document.ref, "child", alice, parent_branch_id=foreign.id)


class TestListAndGet:

    def test_list_newest_first(self, db, document, alice):
        service = BranchService(db)
        first = service.create_branch(document.ref, "first", alice)
        second = service.create_branch(document.ref, "second", alice)

        assert [b.id for b in service.list_branches(document.ref, alice)] == [second.id, first.id]

    def test_list_order_is_stable_for_equal_timestamps(self, db, document, alice):
        service = BranchService(db)
        ids = [service.create_branch(document.ref, f"b{i}", alice).id for i in range(4)]
        db.query(Branch).update(
            {Branch.created_at: datetime(2024, 1, 1, tzinfo=timezone.utc)},
            synchronize_session=False,
        )
        db.commit()

        listed = service.list_branches(document.ref, alice)
        assert [b.id for b in listed] == sorted(ids, reverse=True)

    def test_list_only_this_document(self, db, document, alice):
        other = DocumentService(db).create_document("Other", alice)
        service = BranchService(db)
        service.create_branch(document.ref, "mine", alice)
        service.create_branch(other.ref, "theirs", alice)

        assert [b.name for b in service.list_branches(document.ref, alice)] == ["mine"]

    def test_get_branch(self, db, document, alice):
        service = BranchService(db)
        branch = service.create_branch(document.ref, "main", alice)
        assert service.get_branch(branch.id, alice).name == "main"

    def test_get_missing_branch(self, db, alice):
        with pytest.raises(BranchNotFoundError):
            BranchService(db).get_branch("missing", alice)

    def test_get_checks_document_access(self, db, document, alice, bob):
        branch = BranchService(db).create_branch(document.ref, "main", alice)
        with pytest.raises(ForbiddenError):
            BranchService(db).get_branch(branch.id, bob)


class TestDeactivate:

    def test_deactivated_branch_hidden_but_readable(self, db, document, alice):
        service = BranchService(db)
        branch = service.create_branch(document.ref, "old", alice)
        VersionService(db).commit_version(branch.id, "kept", alice)

        result = service.deactivate_branch(branch.id, alice)

        assert result.is_active is False
        assert service.list_branches(document.ref, alice) == []
        assert service.get_branch(branch.id, alice).is_active is False
        assert VersionService(db).get_head(branch.id, alice).content == "kept"

    def test_deactivate_is_idempotent(self, db, document, alice):
        service = BranchService(db)
        branch = service.create_branch(document.ref, "old", alice)
        service.deactivate_branch(branch.id, alice)
        assert service.deactivate_branch(branch.id, alice).is_active is False


class TestEnsureDefaultBranch:

    def test_creates_once(self, db, document, alice):
        service = BranchService(db, default_branch_name="trunk")
        first = service.ensure_default_branch(document.ref, ActorType.USER, "alice")
        db.commit()
        second = service.ensure_default_branch(document.ref, ActorType.USER, "alice")

        assert first.id == second.id
        assert first.name == "trunk"

    def test_reuses_existing_branch_with_that_name(self, db, document, alice):
        service = BranchService(db)
        main = service.create_branch(document.ref, "main", alice)
        assert service.ensure_default_branch(document.ref, ActorType.USER, "alice").id == main.id

    def test_skips_inactive_default(self, db, document, alice):
        service = BranchService(db)
        old = service.create_branch(document.ref, "main", alice)
        service.deactivate_branch(old.id, alice)

        fresh = service.ensure_default_branch(document.ref, ActorType.USER, "alice")
        assert fresh.id != old.id
        assert fresh.is_active is True
