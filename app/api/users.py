from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_json_body, get_user_service
from app.api.responses import unwrap
from app.core.security import get_current_principal
from app.schemas.user import Principal, UserRead
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserRead])
@router.get("/", response_model=List[UserRead])
def list_users(
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    return unwrap(service.list_users(principal))


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    payload: Any = Depends(get_json_body),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    return unwrap(service.update_user(principal, user_id, payload))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    unwrap(service.delete_user(principal, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
