import logging
import sys
from typing import Optional

from sqlmodel import Session

from app.core.logging import configure_logging
from app.core.security import create_principal_token
from app.database import create_db_and_tables, engine
from app.models.enums import Role
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def create_admin(session: Session, email: str, name: Optional[str] = None):
    """Crea el usuario como ADMIN o promueve uno existente. Idempotente."""
    users = UserRepository(session)
    user = users.find_by_email(email)
    if user is None:
        user = users.create({"email": email, "name": name, "role": Role.ADMIN})
        logger.info("Administrador %s creado", email)
    elif user.role != Role.ADMIN:
        user = users.update(user.id, {"role": Role.ADMIN})
        logger.info("Usuario %s promovido a administrador", email)
    else:
        logger.info("%s ya era administrador", email)
    return user


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Uso: python -m app.scripts.create_admin <email> [nombre]")
        sys.exit(1)

    configure_logging()
    create_db_and_tables()
    with Session(engine) as session:
        admin = create_admin(session, sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
        print(f"✅ Admin listo: {admin.email} ({admin.id})")
        print(f"Token de acceso: {create_principal_token(admin.id, Role.ADMIN)}")
