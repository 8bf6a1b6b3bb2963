"""
Política de autorización por rol y propiedad.

Funciones puras: la única dependencia es ``role_lookup``, que devuelve el
rol actual del usuario en la base de datos. El rol de la sesión puede estar
desactualizado (p. ej. un admin degradado que conserva su token), así que
cada decisión que exige ADMIN o propiedad vuelve a consultarlo. Si la
consulta falla o el usuario ya no existe se usa el rol de la sesión.

Orden de clasificación: sin principal -> ``Unauthenticated`` antes que
cualquier otra comprobación. Los servicios que buscan un recurso por id
comprueban su existencia antes de llamar a ``can_mutate_movement``.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import Unauthenticated
from app.models.enums import Role
from app.schemas.user import Principal

logger = logging.getLogger(__name__)

RoleLookup = Callable[[str], Optional[Role]]


@dataclass(frozen=True)
class MovementScope:
    """Filtro de filas para listar movimientos. ``user_id=None`` = sin filtro."""
    user_id: Optional[str] = None

    @property
    def unscoped(self) -> bool:
        return self.user_id is None


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


def effective_role(principal: Principal, role_lookup: Optional[RoleLookup] = None) -> Role:
    if role_lookup is None:
        return principal.role
    try:
        stored = role_lookup(principal.id)
    except SQLAlchemyError:
        logger.warning("No se pudo consultar el rol de %s, se usa el de la sesión", principal.id)
        return principal.role
    if stored is None:
        return principal.role
    if stored != principal.role:
        logger.info("Rol de sesión %s desactualizado para %s, vigente %s", principal.role.value, principal.id, Role(stored).value)
    return Role(stored)


def is_admin(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    principal = require_principal(principal)
    return effective_role(principal, role_lookup) == Role.ADMIN


def can_list_movements(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> MovementScope:
    principal = require_principal(principal)
    if effective_role(principal, role_lookup) == Role.ADMIN:
        return MovementScope()
    return MovementScope(user_id=principal.id)


def can_create_movement(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    # Solo ADMIN crea movimientos; quedan a nombre del propio admin
    return is_admin(principal, role_lookup)


def can_mutate_movement(principal: Optional[Principal], movement, role_lookup: Optional[RoleLookup] = None) -> bool:
    principal = require_principal(principal)
    if effective_role(principal, role_lookup) == Role.ADMIN:
        return True
    return movement.user_id == principal.id


def can_list_users(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    return is_admin(principal, role_lookup)


def can_mutate_user(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    return is_admin(principal, role_lookup)


def can_delete_user(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    return is_admin(principal, role_lookup)


def can_view_reports(principal: Optional[Principal], role_lookup: Optional[RoleLookup] = None) -> bool:
    return is_admin(principal, role_lookup)
