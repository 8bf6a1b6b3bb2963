import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core import policy
from app.core.errors import (
    DomainInvariantViolation,
    Forbidden,
    NotFound,
    ValidationError,
    returns_result,
)
from app.models.enums import Role
from app.repositories.users import UserRepository
from app.schemas.user import Principal, UserProfileRead, UserRead, UserUpdate

logger = logging.getLogger(__name__)

LAST_ADMIN_MESSAGE = "No se puede eliminar ni degradar al último administrador"


class UserService:
    """Gestión de cuentas, solo para administradores (salvo ``get_me``)."""

    def __init__(self, users: UserRepository):
        self.users = users

    def _require_admin(self, principal: Optional[Principal], check) -> Principal:
        principal = policy.require_principal(principal)
        if not check(principal, self.users.role_of):
            logger.info("Usuario %s sin rol ADMIN intentó gestionar usuarios", principal.id)
            raise Forbidden("No autorizado, se requiere rol de administrador")
        return principal

    def _guard_last_admin(self, target) -> None:
        if target.role == Role.ADMIN and self.users.count_admins_locked() <= 1:
            self.users.rollback()
            raise DomainInvariantViolation(LAST_ADMIN_MESSAGE, reason="LAST_ADMIN")

    @returns_result
    def list_users(self, principal: Optional[Principal]) -> List[UserRead]:
        self._require_admin(principal, policy.can_list_users)
        return [UserRead.model_validate(user) for user in self.users.find_many()]

    @returns_result
    def get_me(self, principal: Optional[Principal]) -> UserProfileRead:
        principal = policy.require_principal(principal)
        user = self.users.find_unique(principal.id)
        if user is None:
            raise NotFound("Usuario no encontrado")
        return UserProfileRead.model_validate(user)

    @returns_result
    def update_user(self, principal: Optional[Principal], user_id: str, payload: Any) -> UserRead:
        principal = self._require_admin(principal, policy.can_mutate_user)

        try:
            data = UserUpdate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc)

        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("No hay campos válidos para actualizar")

        target = self.users.find_unique(user_id)
        if target is None:
            raise NotFound("Usuario no encontrado")

        if changes.get("role") == Role.USER:
            self._guard_last_admin(target)

        user = self.users.update(user_id, changes)
        if user is None:
            raise NotFound("Usuario no encontrado")
        logger.info("Usuario %s actualizado por %s: %s", user_id, principal.id, sorted(changes))
        return UserRead.model_validate(user)

    @returns_result
    def delete_user(self, principal: Optional[Principal], user_id: str) -> None:
        principal = self._require_admin(principal, policy.can_delete_user)

        target = self.users.find_unique(user_id)
        if target is None:
            raise NotFound("Usuario no encontrado")

        # Conteo y borrado en la misma transacción
        self._guard_last_admin(target)
        self.users.delete(user_id, commit=False)
        self.users.commit()
        logger.info("Usuario %s eliminado por %s", user_id, principal.id)
