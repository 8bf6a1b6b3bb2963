from datetime import datetime
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import Err, ErrorKind, Forbidden, Ok
from app.models.enums import MovementType, Role
from app.schemas.user import Principal
from app.services.movements import MovementService, clamp_limit, clamp_page
from tests.conftest import ADMIN_ID, OTHER_USER_ID, USER_ID, make_movement

VALID = {
    "concept": "Salary",
    "amount": 1000,
    "date": "2025-01-01T00:00:00.000Z",
    "type": "INCOME",
}


@pytest.fixture
def service(seeded, movement_repo, user_repo):
    return MovementService(movement_repo, user_repo)


@pytest.fixture
def movements(seeded):
    return {
        "admin": make_movement(seeded, ADMIN_ID, "Admin income", date=datetime(2025, 1, 3)),
        "own": make_movement(seeded, USER_ID, "Own expense", 50, datetime(2025, 1, 2), MovementType.EXPENSE),
        "other": make_movement(seeded, OTHER_USER_ID, "Other income", date=datetime(2025, 1, 1)),
    }


def issue_fields(result):
    return {issue.field for issue in result.issues}


class TestListMovements:
    def test_user_sees_only_own_movements(self, service, user, movements):
        result = service.list_movements(user)

        assert isinstance(result, Ok)
        assert [m.user_id for m in result.value.data] == [USER_ID]
        assert result.value.pagination.total == 1

    def test_admin_sees_everything_newest_first(self, service, admin, movements):
        page = service.list_movements(admin).value

        assert [m.concept for m in page.data] == ["Admin income", "Own expense", "Other income"]
        assert page.data[1].user.email == "user1@example.com"

    def test_unauthenticated(self, service, movements):
        result = service.list_movements(None)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.UNAUTHENTICATED

    def test_pagination_is_clamped(self, service, admin, movements):
        page = service.list_movements(admin, page=-5, limit=99999).value
        assert page.pagination.page == 1
        assert page.pagination.limit == 100

    def test_total_pages_is_ceiling(self, service, admin, movements):
        page = service.list_movements(admin, page=2, limit=2).value

        assert page.pagination.total == 3
        assert page.pagination.total_pages == 2
        assert [m.concept for m in page.data] == ["Other income"]

    def test_page_past_the_end_is_empty(self, service, admin, movements):
        result = service.list_movements(admin, page="99999999999999999999", limit=10)

        assert isinstance(result, Ok)
        assert result.value.data == []
        assert result.value.pagination.total == 3
        assert result.value.pagination.total_pages == 1

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 1), ("abc", 1), (0, 1), (-5, 1), ("3", 3)],
    )
    def test_clamp_page(self, raw, expected):
        assert clamp_page(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 10), ("abc", 10), (0, 10), (-5, 1), (99999, 100), ("25", 25)],
    )
    def test_clamp_limit(self, raw, expected):
        assert clamp_limit(raw) == expected


class TestCreateMovement:
    def test_admin_creates_movement_for_themselves(self, service, admin):
        result = service.create_movement(admin, dict(VALID))

        assert isinstance(result, Ok)
        assert result.value.user_id == ADMIN_ID
        assert result.value.amount == 1000
        assert result.value.type == MovementType.INCOME

    def test_user_cannot_create(self, service, user, movement_repo):
        result = service.create_movement(user, dict(VALID))

        assert result.kind == ErrorKind.FORBIDDEN
        assert movement_repo.count() == 0

    def test_concept_is_trimmed(self, service, admin):
        result = service.create_movement(admin, {**VALID, "concept": "  Salary  "})
        assert result.value.concept == "Salary"

    @pytest.mark.parametrize("amount", [0, -10, "abc", 999999999.01, 1000000000, 10.005])
    def test_invalid_amounts_are_rejected(self, service, admin, amount):
        result = service.create_movement(admin, {**VALID, "amount": amount})

        assert result.kind == ErrorKind.VALIDATION
        assert issue_fields(result) == {"amount"}

    @pytest.mark.parametrize("type_", ["income", "Expense", "TRANSFER"])
    def test_type_is_case_sensitive(self, service, admin, type_):
        result = service.create_movement(admin, {**VALID, "type": type_})
        assert issue_fields(result) == {"type"}

    @pytest.mark.parametrize("concept", ["", "   ", "<b>bold</b>", "a" * 201])
    def test_invalid_concepts_are_rejected(self, service, admin, concept):
        result = service.create_movement(admin, {**VALID, "concept": concept})
        assert issue_fields(result) == {"concept"}

    def test_reports_every_invalid_field_at_once(self, service, admin, movement_repo):
        result = service.create_movement(admin, {"concept": "", "amount": -1, "date": "not a date", "type": "x"})

        assert result.kind == ErrorKind.VALIDATION
        assert issue_fields(result) == {"concept", "amount", "date", "type"}
        assert movement_repo.count() == 0

    def test_missing_body(self, service, admin):
        result = service.create_movement(admin, None)
        assert result.kind == ErrorKind.VALIDATION

    def test_database_failure_is_internal_error(self, admin, user_repo):
        repo = Mock()
        repo.create.side_effect = OperationalError("INSERT", {}, Exception("db down"))
        result = MovementService(repo, user_repo).create_movement(admin, dict(VALID))

        assert result.kind == ErrorKind.INTERNAL
        assert result.status_code == 500


class TestUpdateMovement:
    def test_owner_updates_only_given_fields(self, service, user, movements):
        own = movements["own"]
        result = service.update_movement(user, own.id, {"concept": " Groceries "})

        assert result.value.concept == "Groceries"
        assert result.value.amount == 50
        assert result.value.type == MovementType.EXPENSE

    def test_admin_updates_any_movement(self, service, admin, movements):
        result = service.update_movement(admin, movements["other"].id, {"amount": 75.25, "type": "EXPENSE"})

        assert result.value.amount == 75.25
        assert result.value.type == MovementType.EXPENSE

    def test_not_owner_is_forbidden_with_reason(self, service, user, movements):
        result = service.update_movement(user, movements["other"].id, {"concept": "Hacked"})

        assert result.kind == ErrorKind.FORBIDDEN
        assert result.reason == Forbidden.NOT_OWNER

    def test_not_found_is_checked_before_ownership(self, service, user, movements):
        result = service.update_movement(user, "missing", {"concept": "x"})
        assert result.kind == ErrorKind.NOT_FOUND

    def test_forbidden_is_checked_before_payload(self, service, user, movements):
        result = service.update_movement(user, movements["other"].id, {})
        assert result.kind == ErrorKind.FORBIDDEN

    def test_at_least_one_field_is_required(self, service, user, movements):
        result = service.update_movement(user, movements["own"].id, {"unknown": 1})
        assert result.kind == ErrorKind.VALIDATION

    def test_provided_fields_use_create_rules(self, service, user, movements):
        result = service.update_movement(user, movements["own"].id, {"amount": 0, "type": "income", "concept": None})

        assert result.kind == ErrorKind.VALIDATION
        assert issue_fields(result) == {"amount", "type", "concept"}

    def test_vanished_row_is_internal_error(self, user, movements, user_repo, movement_repo):
        repo = Mock(wraps=movement_repo)
        repo.update.return_value = None
        result = MovementService(repo, user_repo).update_movement(user, movements["own"].id, {"concept": "x"})

        assert result.kind == ErrorKind.INTERNAL


class TestDeleteMovement:
    def test_owner_deletes(self, service, user, movements, movement_repo):
        result = service.delete_movement(user, movements["own"].id)

        assert isinstance(result, Ok)
        assert movement_repo.find_unique(movements["own"].id) is None
        assert movement_repo.count() == 2

    def test_not_owner_cannot_delete(self, service, user, movements, movement_repo):
        result = service.delete_movement(user, movements["admin"].id)

        assert result.kind == ErrorKind.FORBIDDEN
        assert movement_repo.count() == 3

    def test_missing_movement(self, service, admin, movements):
        assert service.delete_movement(admin, "missing").kind == ErrorKind.NOT_FOUND

    def test_unauthenticated_before_not_found(self, service, movements):
        assert service.delete_movement(None, "missing").kind == ErrorKind.UNAUTHENTICATED

    def test_demoted_admin_session_loses_access(self, service, movements, user_repo):
        user_repo.update(ADMIN_ID, {"role": Role.USER})
        stale = Principal(id=ADMIN_ID, role=Role.ADMIN)

        assert service.delete_movement(stale, movements["own"].id).kind == ErrorKind.FORBIDDEN
