from datetime import datetime
from unittest.mock import Mock

import pytest
from sqlalchemy import DateTime
from sqlalchemy.exc import OperationalError

from app.models.enums import MovementType
from app.models.movement import Movement
from app.models.user import User
from app.repositories.users import UserRepository
from tests.conftest import USER_ID


@pytest.mark.parametrize(
    "column",
    [Movement.__table__.c.date, Movement.__table__.c.created_at, Movement.__table__.c.updated_at,
     User.__table__.c.created_at, User.__table__.c.updated_at],
)
def test_timestamp_columns_are_naive_utc(column):
    assert isinstance(column.type, DateTime)
    assert column.type.timezone is False


def test_create_and_update_movement_keep_naive_utc(movement_repo, seeded):
    movement = movement_repo.create({
        "concept": "Salary",
        "amount": 1000.0,
        "date": datetime(2025, 1, 1, 12, 30),
        "type": MovementType.INCOME,
        "user_id": USER_ID,
    })

    assert movement.date == datetime(2025, 1, 1, 12, 30)
    assert movement.created_at.tzinfo is None

    created_at = movement.created_at
    updated = movement_repo.update(movement.id, {"amount": 250.5, "date": datetime(2025, 2, 1)})

    assert updated.amount == 250.5
    assert updated.date == datetime(2025, 2, 1)
    assert updated.updated_at.tzinfo is None
    assert updated.updated_at >= created_at


def test_user_update_stamps_updated_at(user_repo, seeded):
    user = user_repo.update(USER_ID, {"name": "Renamed"})

    assert user.name == "Renamed"
    assert user.updated_at.tzinfo is None


def test_failed_role_lookup_rolls_back_the_session():
    session = Mock()
    session.exec.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    repo = UserRepository(session)

    with pytest.raises(OperationalError):
        repo.role_of(USER_ID)
    session.rollback.assert_called_once()
