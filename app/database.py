import logging

from sqlmodel import SQLModel, Session, create_engine

from app.core.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# SQLite necesita compartir la conexión entre hilos del servidor
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)


def create_db_and_tables():
    from app.models.user import User  # noqa: F401  importar los modelos
    from app.models.movement import Movement  # noqa: F401
    SQLModel.metadata.create_all(engine)
    logger.info("Tablas verificadas en %s", engine.url.render_as_string(hide_password=True))


def get_session():
    with Session(engine) as session:
        yield session
