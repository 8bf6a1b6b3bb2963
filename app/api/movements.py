from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_json_body, get_movement_service
from app.api.responses import unwrap
from app.core.config import DEFAULT_PAGE_SIZE
from app.core.security import get_current_principal
from app.schemas.movement import MovementPage, MovementRead
from app.schemas.user import Principal
from app.services.movements import MovementService

router = APIRouter(prefix="/movements", tags=["movements"])


# Los parámetros llegan como texto; el servicio los acota sin fallar nunca
@router.get("", response_model=MovementPage)
@router.get("/", response_model=MovementPage)
def list_movements(
    page: Optional[str] = Query("1", description="Número de página (>= 1)"),
    limit: Optional[str] = Query(str(DEFAULT_PAGE_SIZE), description="Elementos por página (1..100)"),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: MovementService = Depends(get_movement_service),
):
    return unwrap(service.list_movements(principal, page, limit))


@router.post("", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
def create_movement(
    payload: Any = Depends(get_json_body),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: MovementService = Depends(get_movement_service),
):
    return unwrap(service.create_movement(principal, payload))


@router.patch("/{movement_id}", response_model=MovementRead)
def update_movement(
    movement_id: str,
    payload: Any = Depends(get_json_body),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: MovementService = Depends(get_movement_service),
):
    return unwrap(service.update_movement(principal, movement_id, payload))


@router.delete("/{movement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movement(
    movement_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: MovementService = Depends(get_movement_service),
):
    unwrap(service.delete_movement(principal, movement_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
