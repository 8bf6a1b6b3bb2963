import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from app.models.enums import Role
from app.schemas.user import Principal

logger = logging.getLogger(__name__)

# Los tokens los emite el proveedor externo; aquí solo se lee el Bearer.
# auto_error=False: la ausencia de token la clasifican los servicios como 401
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_principal_token(user_id: str, role: Role, expires_delta: Optional[timedelta] = None):
    return create_access_token({"sub": user_id, "role": Role(role).value}, expires_delta)


def decode_principal(token: str) -> Optional[Principal]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        logger.info("Token rechazado")
        return None

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in (Role.USER.value, Role.ADMIN.value):
        logger.info("Token sin sub o con rol desconocido")
        return None
    return Principal(id=str(user_id), role=Role(role))


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """Resuelve el principal de la petición, o None si no hay sesión válida."""
    if credentials is None or not credentials.credentials:
        return None
    return decode_principal(credentials.credentials)
