from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_user_service
from app.api.responses import unwrap
from app.core.security import get_current_principal
from app.schemas.user import Principal, UserProfileRead
from app.services.users import UserService

router = APIRouter(tags=["auth"])


# Perfil del usuario autenticado
@router.get("/me", response_model=UserProfileRead)
def read_me(
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    return unwrap(service.get_me(principal))
