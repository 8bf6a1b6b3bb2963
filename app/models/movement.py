from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from uuid import uuid4
from datetime import datetime
from typing import Optional

from app.models.enums import MovementType
from app.models.user import User
from app.utils.date_helpers import utc_now

class Movement(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    concept: str = Field(max_length=200)
    amount: float
    # Columnas DateTime sin zona: siempre UTC naive (ver utc_now)
    date: datetime = Field(index=True, sa_type=DateTime)
    type: MovementType
    user_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    user: Optional[User] = Relationship()
