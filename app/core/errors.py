"""
Taxonomía de errores de acceso y resultado etiquetado de los servicios.

Los servicios nunca lanzan hacia la capa HTTP: devuelven ``Ok(valor)`` o
``Err(kind, message, ...)``. Internamente la política y las validaciones
lanzan subclases de ``AccessError`` y el decorador ``returns_result`` las
convierte en ``Err`` en el borde del servicio, junto con cualquier error de
SQLAlchemy (reclasificado como ``INTERNAL``).
"""
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    DOMAIN_INVARIANT = "DOMAIN_INVARIANT"
    INTERNAL = "INTERNAL"


# Código HTTP que la capa web usa para cada tipo de error
STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.DOMAIN_INVARIANT: 400,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class FieldIssue:
    field: str
    message: str


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    reason: Optional[str] = None
    issues: List[FieldIssue] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


Result = Union[Ok[T], Err]


class AccessError(Exception):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_err(self) -> Err:
        return Err(kind=self.kind, message=self.message, reason=self.reason)


class Unauthenticated(AccessError):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "No autenticado"):
        super().__init__(message)


class Forbidden(AccessError):
    """Principal presente pero sin permiso. ``reason`` distingue el motivo."""

    kind = ErrorKind.FORBIDDEN

    # Motivos legibles por máquina
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    NOT_OWNER = "NOT_OWNER"

    def __init__(self, message: str = "No autorizado", reason: str = ADMIN_REQUIRED):
        super().__init__(message, reason)


class NotFound(AccessError):
    kind = ErrorKind.NOT_FOUND


class ValidationError(AccessError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "Datos inválidos", issues: Optional[List[FieldIssue]] = None):
        super().__init__(message)
        self.issues = list(issues or [])

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Traduce un ``pydantic.ValidationError`` reportando todos los campos a la vez."""
        issues = []
        for error in exc.errors():
            field_name = ".".join(str(part) for part in error["loc"]) or "body"
            ctx = error.get("ctx") or {}
            if error["type"] == "value_error" and "error" in ctx:
                message = str(ctx["error"])
            else:
                message = error["msg"]
            issues.append(FieldIssue(field=field_name, message=message))
        return cls(issues=issues)

    def to_err(self) -> Err:
        return Err(kind=self.kind, message=self.message, issues=self.issues)


class DomainInvariantViolation(AccessError):
    kind = ErrorKind.DOMAIN_INVARIANT


class InternalError(AccessError):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Error interno del servidor", reason: Optional[str] = "DATABASE_ERROR"):
        super().__init__(message, reason)


def returns_result(func: Callable[..., Any]) -> Callable[..., Result]:
    """Envuelve una operación de servicio para que devuelva Ok/Err."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return Ok(func(*args, **kwargs))
        except AccessError as exc:
            return exc.to_err()
        except SQLAlchemyError:
            logger.exception("Fallo de persistencia en %s", func.__qualname__)
            return InternalError().to_err()

    return wrapper
