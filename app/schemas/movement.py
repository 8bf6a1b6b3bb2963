import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictStr, field_validator

from app.models.enums import MovementType
from app.schemas.user import UserRead
from app.utils.date_helpers import to_utc_naive

MAX_CONCEPT_LENGTH = 200
MAX_AMOUNT = 999_999_999
MAX_SAFE_INTEGER = 2**53 - 1

_MARKUP = re.compile(r"[<>]")


def check_concept(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("El concepto es obligatorio")
    if len(value) > MAX_CONCEPT_LENGTH:
        raise ValueError(f"El concepto no puede superar {MAX_CONCEPT_LENGTH} caracteres")
    if _MARKUP.search(value):
        raise ValueError("El concepto no puede contener etiquetas HTML")
    return value


def check_amount(value: float) -> float:
    value = float(value)
    # NaN no cumple ninguna comparación, por eso se niega la condición
    if not value > 0:
        raise ValueError("El monto debe ser mayor a cero")
    if value > MAX_AMOUNT:
        raise ValueError("El monto excede el máximo permitido")
    cents = value * 100
    if not (cents.is_integer() and abs(cents) <= MAX_SAFE_INTEGER):
        raise ValueError("El monto debe ser un valor monetario válido")
    return value


class MovementCreate(BaseModel):
    concept: StrictStr
    amount: StrictFloat
    date: datetime
    type: MovementType

    @field_validator("concept")
    @classmethod
    def concept_is_clean(cls, v):
        return check_concept(v)

    @field_validator("amount")
    @classmethod
    def amount_is_monetary(cls, v):
        return check_amount(v)

    @field_validator("date")
    @classmethod
    def date_in_utc(cls, v):
        return to_utc_naive(v)


class MovementUpdate(BaseModel):
    """PATCH parcial: solo se validan y guardan los campos enviados."""

    concept: StrictStr = None
    amount: StrictFloat = None
    date: datetime = None
    type: MovementType = None

    @field_validator("*", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("El campo no puede ser nulo")
        return v

    @field_validator("concept")
    @classmethod
    def concept_is_clean(cls, v):
        return check_concept(v)

    @field_validator("amount")
    @classmethod
    def amount_is_monetary(cls, v):
        return check_amount(v)

    @field_validator("date")
    @classmethod
    def date_in_utc(cls, v):
        return to_utc_naive(v)


class MovementRead(BaseModel):
    id: str
    concept: str
    amount: float
    date: datetime
    type: MovementType
    user_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def mark_utc(cls, v):
        # En la base de datos se guardan sin tzinfo, siempre en UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class MovementWithUserRead(MovementRead):
    user: Optional[UserRead] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MovementPage(BaseModel):
    data: List[MovementWithUserRead]
    pagination: Pagination
