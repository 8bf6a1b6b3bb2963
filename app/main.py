import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.core.config import CORS_ORIGINS
from app.core.logging import configure_logging
from app.database import create_db_and_tables
from app.api import auth, movements, reports, users
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    create_db_and_tables()
    logger.info("Servidor de movimientos listo")
    yield

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(movements.router)
app.include_router(users.router)
app.include_router(reports.router)

@app.get("/")
def root():
    return {"message": "Servidor de movimientos financieros"}
