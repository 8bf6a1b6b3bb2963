from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from uuid import uuid4
from datetime import datetime
from typing import Optional

from app.models.enums import Role
from app.utils.date_helpers import utc_now

class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: Optional[str] = None
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    image: Optional[str] = None
    role: Role = Field(default=Role.USER, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
