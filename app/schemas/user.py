from pydantic import BaseModel, ConfigDict, StrictStr, field_validator
from typing import Optional

from app.models.enums import Role

class Principal(BaseModel):
    """Usuario autenticado de la petición, tal como lo resuelve el token."""
    id: str
    role: Role

    model_config = ConfigDict(frozen=True)

class UserRead(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: Role

    model_config = ConfigDict(from_attributes=True)

class UserProfileRead(UserRead):
    image: Optional[str] = None

class UserUpdate(BaseModel):
    name: Optional[StrictStr] = None
    role: Optional[Role] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v is not None else v
