import json
from typing import Any

from fastapi import Depends, Request
from sqlmodel import Session

from app.database import get_session
from app.repositories.movements import MovementRepository
from app.repositories.users import UserRepository
from app.services.movements import MovementService
from app.services.reports import ReportService
from app.services.users import UserService


async def get_json_body(request: Request) -> Any:
    """Cuerpo de la petición sin validar.

    FastAPI respondería 422 con un JSON mal formado antes de llegar a la ruta;
    aquí el texto crudo se entrega tal cual y el servicio lo rechaza como
    VALIDATION después de comprobar sesión y permisos.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")


def get_movement_service(session: Session = Depends(get_session)) -> MovementService:
    return MovementService(MovementRepository(session), UserRepository(session))


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(UserRepository(session))


def get_report_service(session: Session = Depends(get_session)) -> ReportService:
    return ReportService(MovementRepository(session), UserRepository(session))
