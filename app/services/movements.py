import logging
import math
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core import policy
from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.errors import (
    Forbidden,
    InternalError,
    NotFound,
    ValidationError,
    returns_result,
)
from app.repositories.movements import MovementRepository
from app.repositories.users import UserRepository
from app.schemas.movement import (
    MovementCreate,
    MovementPage,
    MovementRead,
    MovementUpdate,
    MovementWithUserRead,
    Pagination,
)
from app.schemas.user import Principal

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def clamp_page(page: Any) -> int:
    """Página >= 1; valores inválidos o no positivos vuelven a 1."""
    number = _to_int(page)
    return max(1, number) if number else 1


def clamp_limit(limit: Any) -> int:
    """Tamaño de página entre 1 y MAX_PAGE_SIZE, nunca falla."""
    number = _to_int(limit) or DEFAULT_PAGE_SIZE
    return min(MAX_PAGE_SIZE, max(1, number))


class MovementService:
    def __init__(self, movements: MovementRepository, users: UserRepository):
        self.movements = movements
        self.users = users

    def _load_for_mutation(self, principal: Optional[Principal], movement_id: str):
        # Autenticación, luego existencia, luego propiedad
        principal = policy.require_principal(principal)
        movement = self.movements.find_unique(movement_id)
        if movement is None:
            raise NotFound("Movimiento no encontrado")
        if not policy.can_mutate_movement(principal, movement, self.users.role_of):
            logger.info("Usuario %s intentó modificar el movimiento ajeno %s", principal.id, movement_id)
            raise Forbidden("No puedes modificar este movimiento", reason=Forbidden.NOT_OWNER)
        return principal, movement

    @returns_result
    def list_movements(self, principal: Optional[Principal], page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE) -> MovementPage:
        scope = policy.can_list_movements(principal, self.users.role_of)
        page_number = clamp_page(page)
        page_size = clamp_limit(limit)

        total = self.movements.count(user_id=scope.user_id)
        skip = (page_number - 1) * page_size
        # Más allá de la última fila la página es vacía; el OFFSET podría
        # además desbordar el entero del motor
        rows = []
        if skip < total:
            rows = self.movements.find_many(
                user_id=scope.user_id,
                skip=skip,
                take=page_size,
                with_user=True,
            )
        return MovementPage(
            data=[MovementWithUserRead.model_validate(row) for row in rows],
            pagination=Pagination(
                page=page_number,
                limit=page_size,
                total=total,
                total_pages=math.ceil(total / page_size),
            ),
        )

    @returns_result
    def create_movement(self, principal: Optional[Principal], payload: Any) -> MovementRead:
        principal = policy.require_principal(principal)
        if not policy.can_create_movement(principal, self.users.role_of):
            logger.info("Usuario %s sin rol ADMIN intentó crear un movimiento", principal.id)
            raise Forbidden("No autorizado, se requiere rol de administrador")

        try:
            data = MovementCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc)

        movement = self.movements.create({**data.model_dump(), "user_id": principal.id})
        logger.info("Movimiento %s creado por %s", movement.id, principal.id)
        return MovementRead.model_validate(movement)

    @returns_result
    def update_movement(self, principal: Optional[Principal], movement_id: str, payload: Any) -> MovementRead:
        principal, _ = self._load_for_mutation(principal, movement_id)

        try:
            data = MovementUpdate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc)

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No hay campos válidos para actualizar")

        movement = self.movements.update(movement_id, changes)
        if movement is None:
            logger.error("El movimiento %s desapareció antes de actualizarse", movement_id)
            raise InternalError()
        return MovementRead.model_validate(movement)

    @returns_result
    def delete_movement(self, principal: Optional[Principal], movement_id: str) -> None:
        principal, _ = self._load_for_mutation(principal, movement_id)
        if not self.movements.delete(movement_id):
            logger.error("El movimiento %s desapareció antes de eliminarse", movement_id)
            raise InternalError()
        logger.info("Movimiento %s eliminado por %s", movement_id, principal.id)
