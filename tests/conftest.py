"""Fixtures compartidas: SQLite en memoria, usuarios sembrados y TestClient."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.security import create_principal_token
from app.database import get_session
from app.main import app
from app.models.enums import MovementType, Role
from app.models.movement import Movement
from app.models.user import User
from app.repositories.movements import MovementRepository
from app.repositories.users import UserRepository
from app.schemas.user import Principal

ADMIN_ID = "admin-1"
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seeded(session):
    """Un admin y dos usuarios, con fechas de alta distintas para ordenar."""
    session.add_all([
        User(id=ADMIN_ID, name="Admin", email="admin@example.com", role=Role.ADMIN,
             created_at=datetime(2025, 1, 1)),
        User(id=USER_ID, name="User One", email="user1@example.com", phone="+57 3001234567",
             role=Role.USER, created_at=datetime(2025, 1, 2)),
        User(id=OTHER_USER_ID, name=None, email="user2@example.com", role=Role.USER,
             created_at=datetime(2025, 1, 3)),
    ])
    session.commit()
    return session


def make_movement(session, user_id, concept="Salary", amount=100.0, date=None, type_=MovementType.INCOME):
    movement = Movement(
        concept=concept,
        amount=amount,
        date=date or datetime(2025, 1, 1),
        type=type_,
        user_id=user_id,
    )
    session.add(movement)
    session.commit()
    session.refresh(movement)
    return movement


@pytest.fixture
def movement_repo(session):
    return MovementRepository(session)


@pytest.fixture
def user_repo(session):
    return UserRepository(session)


@pytest.fixture
def admin():
    return Principal(id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def user():
    return Principal(id=USER_ID, role=Role.USER)


@pytest.fixture
def client(seeded):
    def override_get_session():
        return seeded

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id, role):
    return {"Authorization": f"Bearer {create_principal_token(user_id, role)}"}


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, Role.ADMIN)


@pytest.fixture
def user_headers():
    return auth_headers(USER_ID, Role.USER)
