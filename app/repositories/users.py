import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.enums import Role
from app.models.movement import Movement
from app.models.user import User
from app.utils.date_helpers import utc_now

logger = logging.getLogger(__name__)


class UserRepository:
    """Acceso a la tabla de usuarios sobre una sesión inyectada."""

    def __init__(self, session: Session):
        self.session = session

    def find_many(self) -> List[User]:
        statement = select(User).order_by(User.created_at.desc())
        return list(self.session.exec(statement).all())

    def find_unique(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email)).first()

    def role_of(self, user_id: str) -> Optional[Role]:
        """Rol vigente en base de datos, usado por la política de autorización.

        Si la consulta falla se revierte la transacción antes de propagar el
        error, para que la sesión siga utilizable con el rol del token.
        """
        try:
            return self.session.exec(select(User.role).where(User.id == user_id)).first()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def count(self, role: Optional[Role] = None) -> int:
        statement = select(func.count()).select_from(User)
        if role is not None:
            statement = statement.where(User.role == role)
        return self.session.exec(statement).one()

    def count_admins_locked(self) -> int:
        """Cuenta los ADMIN bloqueando sus filas hasta el commit (FOR UPDATE).

        En SQLite la cláusula se omite; ahí la escritura ya está serializada.
        """
        statement = select(User.id).where(User.role == Role.ADMIN).with_for_update()
        return len(self.session.exec(statement).all())

    def create(self, data: dict) -> User:
        user = User(**data)
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def update(self, user_id: str, data: dict, commit: bool = True) -> Optional[User]:
        user = self.session.get(User, user_id)
        if user is None:
            return None
        for key, value in data.items():
            setattr(user, key, value)
        user.updated_at = utc_now()
        self.session.add(user)
        if commit:
            self._commit()
            self.session.refresh(user)
        return user

    def delete(self, user_id: str, commit: bool = True) -> bool:
        """Elimina el usuario junto con sus movimientos."""
        user = self.session.get(User, user_id)
        if user is None:
            return False
        movements = self.session.exec(select(Movement).where(Movement.user_id == user_id)).all()
        for movement in movements:
            self.session.delete(movement)
        self.session.delete(user)
        if commit:
            self._commit()
        return True

    def commit(self):
        self._commit()

    def rollback(self):
        self.session.rollback()

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
