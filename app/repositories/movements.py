import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from app.models.movement import Movement
from app.utils.date_helpers import utc_now

logger = logging.getLogger(__name__)


class MovementRepository:
    """Acceso a la tabla de movimientos sobre una sesión inyectada."""

    def __init__(self, session: Session):
        self.session = session

    def _filtered(self, statement, user_id: Optional[str]):
        if user_id is not None:
            statement = statement.where(Movement.user_id == user_id)
        return statement

    def find_many(
        self,
        user_id: Optional[str] = None,
        skip: int = 0,
        take: Optional[int] = None,
        newest_first: bool = True,
        with_user: bool = False,
    ) -> List[Movement]:
        statement = self._filtered(select(Movement), user_id)
        statement = statement.order_by(Movement.date.desc() if newest_first else Movement.date.asc())
        if with_user:
            statement = statement.options(selectinload(Movement.user))
        if skip:
            statement = statement.offset(skip)
        if take is not None:
            statement = statement.limit(take)
        return list(self.session.exec(statement).all())

    def count(self, user_id: Optional[str] = None) -> int:
        statement = self._filtered(select(func.count()).select_from(Movement), user_id)
        return self.session.exec(statement).one()

    def find_unique(self, movement_id: str) -> Optional[Movement]:
        return self.session.get(Movement, movement_id)

    def create(self, data: dict) -> Movement:
        movement = Movement(**data)
        self.session.add(movement)
        self._commit()
        self.session.refresh(movement)
        return movement

    def update(self, movement_id: str, data: dict) -> Optional[Movement]:
        """Devuelve None si la fila desapareció entre la consulta y la escritura."""
        movement = self.session.get(Movement, movement_id)
        if movement is None:
            return None
        for key, value in data.items():
            setattr(movement, key, value)
        movement.updated_at = utc_now()
        self.session.add(movement)
        self._commit()
        self.session.refresh(movement)
        return movement

    def delete(self, movement_id: str) -> bool:
        movement = self.session.get(Movement, movement_id)
        if movement is None:
            return False
        self.session.delete(movement)
        self._commit()
        return True

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
